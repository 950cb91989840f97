import pytest

from pkgfiles.domain.errors import RegistryError, RegistryNotFound, VersionNotFound
from pkgfiles.domain.models import RegistryIndex
from pkgfiles.domain.versions import is_exact_version, resolve_version


@pytest.fixture
def index() -> RegistryIndex:
    return RegistryIndex.model_validate(
        {"dist-tags": {"latest": "1.2.0"}, "versions": {"1.0.0": {}, "1.2.0": {}}}
    )


def test_dist_tag(index: RegistryIndex) -> None:
    resolved = resolve_version(index, "latest")

    assert resolved.exact_version == "1.2.0"
    assert resolved.was_dist_tag is True


def test_exact_version(index: RegistryIndex) -> None:
    resolved = resolve_version(index, "1.0.0")

    assert resolved.exact_version == "1.0.0"
    assert resolved.was_dist_tag is False


def test_range_picks_highest_match(index: RegistryIndex) -> None:
    assert resolve_version(index, "^1.0.0").exact_version == "1.2.0"
    assert resolve_version(index, "~1.0.0").exact_version == "1.0.0"


def test_unsatisfied_range(index: RegistryIndex) -> None:
    with pytest.raises(VersionNotFound):
        resolve_version(index, "^2.0.0")


def test_unknown_tag_is_version_not_found(index: RegistryIndex) -> None:
    with pytest.raises(VersionNotFound):
        resolve_version(index, "beta")


def test_tag_pointing_at_unpublished_version() -> None:
    index = RegistryIndex.model_validate({"dist-tags": {"next": "3.0.0"}, "versions": {"1.0.0": {}}})

    with pytest.raises(VersionNotFound):
        resolve_version(index, "next")


def test_prereleases_are_skipped_by_plain_ranges() -> None:
    index = RegistryIndex.model_validate(
        {"dist-tags": {}, "versions": {"1.0.0": {}, "1.1.0-beta.1": {}, "not-a-version": {}}}
    )

    assert resolve_version(index, "^1.0.0").exact_version == "1.0.0"
    assert resolve_version(index, "1.1.0-beta.1").exact_version == "1.1.0-beta.1"


def test_missing_or_error_index() -> None:
    with pytest.raises(RegistryNotFound):
        resolve_version(None, "latest")
    with pytest.raises(RegistryNotFound):
        resolve_version(RegistryIndex(error="Not Found"), "latest")
    with pytest.raises(RegistryError):
        resolve_version(RegistryIndex(error="Unauthorized"), "latest")


@pytest.mark.parametrize(
    "spec, expected",
    [("1.0.0", True), ("1.2.3-rc.1", True), ("latest", False), ("^1.0.0", False), ("1.0", False), ("", False)],
)
def test_is_exact_version(spec: str, expected: bool) -> None:
    assert is_exact_version(spec) is expected
