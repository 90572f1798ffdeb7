"""Test package layout."""
from pathlib import Path


def test_init_py_has_version():
    """Test that __init__.py has __version__ attribute."""
    root = Path(__file__).parent.parent.parent
    init_py = root / "src" / "caught" / "__init__.py"

    content = init_py.read_text()
    assert "__version__" in content, "__init__.py should define __version__"


def test_py_typed_exists():
    """Test that py.typed marker exists."""
    root = Path(__file__).parent.parent.parent
    py_typed = root / "src" / "caught" / "py.typed"

    assert py_typed.is_file(), f"py.typed should exist at {py_typed}"


def test_module_can_be_imported():
    """Test that caught can be imported and exposes its entry points."""
    import caught

    assert hasattr(caught, "__version__")
    for name in ("wrap_success", "wrap_failure", "run_safely", "run_safely_async", "wrap_pending"):
        assert callable(getattr(caught, name)), f"caught.{name} should be callable"


def test_all_exports_resolve():
    """Every name in __all__ exists on the package."""
    import caught

    missing = [name for name in caught.__all__ if not hasattr(caught, name)]
    assert missing == []
