import pytest
from pydantic import ValidationError as PydanticValidationError

from cloudinary_client.options import (
    Options, apply_options, with_upload_preset, with_public_id, with_folder,
    with_use_filename, with_unique_filename, with_resource_type, with_type,
    with_overwrite, with_tags, with_auto_tagging, with_keep_original,
    with_invalidate, with_next_cursor, with_timestamp, with_colors, with_context
)


@pytest.mark.unit
def test_defaults_are_unset():
    """Test a fresh Options has nothing set"""
    options = Options()

    assert options.set_fields() == {}
    assert options.upload_params() == {}
    assert options.admin_params() == {}
    assert options.resource_type_or_default() == "image"
    assert options.storage_type_or_default() == "upload"


@pytest.mark.unit
def test_apply_options_in_order():
    """Test setters apply in order and the last write wins"""
    options = apply_options(
        with_public_id("first"),
        with_folder("pets"),
        with_public_id("second"),
    )

    assert options.public_id == "second"
    assert options.folder == "pets"


@pytest.mark.unit
def test_upload_params_serialization():
    """Test set fields map to string form parameters"""
    options = apply_options(
        with_public_id("cat"),
        with_use_filename(True),
        with_unique_filename(False),
        with_auto_tagging(0.6),
        with_tags(["animal", "cat"]),
        with_context("alt=Cat|caption=Sleeping"),
    )

    assert options.upload_params() == {
        "public_id": "cat",
        "use_filename": "true",
        "unique_filename": "false",
        "auto_tagging": "0.6",
        "tags": "animal,cat",
        "context": "alt=Cat|caption=Sleeping",
    }


@pytest.mark.unit
def test_upload_params_exclude_routing_and_admin_fields():
    """Test resource_type, keep_original, next_cursor and timestamp are not form fields"""
    options = apply_options(
        with_resource_type("video"),
        with_keep_original(True),
        with_next_cursor("abc"),
        with_timestamp(1315060510),
        with_type("private"),
    )

    assert options.upload_params() == {"type": "private"}
    assert options.timestamp == "1315060510"


@pytest.mark.unit
def test_admin_params():
    """Test admin query parameters"""
    options = apply_options(
        with_keep_original(True),
        with_invalidate(False),
        with_next_cursor("cursor-1"),
        with_public_id("ignored"),
    )

    assert options.admin_params() == {
        "keep_original": "true",
        "invalidate": "false",
        "next_cursor": "cursor-1",
    }


@pytest.mark.unit
def test_resource_and_storage_type_overrides():
    """Test routing defaults can be overridden"""
    options = apply_options(with_resource_type("raw"), with_type("authenticated"))

    assert options.resource_type_or_default() == "raw"
    assert options.storage_type_or_default() == "authenticated"


@pytest.mark.unit
def test_async_alias():
    """Test the 'async' API name maps to the async_ field"""
    options = Options.model_validate({"async": True})

    assert options.async_ is True
    assert options.upload_params() == {"async": "true"}


@pytest.mark.unit
def test_setters_are_type_checked():
    """Test assignment validation rejects values of the wrong type"""
    with pytest.raises(PydanticValidationError):
        apply_options(with_colors({"not": "a bool"}))


@pytest.mark.unit
def test_unknown_fields_rejected():
    """Test misspelled parameter names fail instead of being dropped"""
    with pytest.raises(PydanticValidationError):
        Options.model_validate({"publicid": "cat"})


@pytest.mark.unit
def test_setter_is_reusable():
    """Test one setter can configure several Options"""
    preset = with_upload_preset("unsigned_avatars")

    first = apply_options(preset)
    second = apply_options(preset, with_overwrite(False))

    assert first.upload_preset == second.upload_preset == "unsigned_avatars"
    assert second.overwrite is False
    assert first.overwrite is None


@pytest.mark.unit
def test_upload_params_drop_empty_values():
    """Test values serializing to an empty string are not sent"""
    options = apply_options(with_folder(""), with_tags([]), with_context("alt=Cat"))

    assert options.upload_params() == {"context": "alt=Cat"}
