from govmocks.core.paths import DDEV_EXAMPLE, LOCAL_EXAMPLE, RESOURCES_DIR


def test_bundled_examples_exist():
    assert LOCAL_EXAMPLE.is_file()
    assert DDEV_EXAMPLE.is_file()
    assert sorted(RESOURCES_DIR.glob("*.overrides")) == [DDEV_EXAMPLE, LOCAL_EXAMPLE]
