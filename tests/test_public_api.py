from __future__ import annotations

import blocksharp
import pytest

from blocksharp.errors import DeclarationError


def test_public_api_exposes_version_and_about() -> None:
    assert isinstance(blocksharp.__version__, str)
    text = blocksharp.about(print_output=False)
    assert "MonoBehaviour" in text
    assert "scope-out" in text


def test_public_api_all_contains_core_exports() -> None:
    exported = set(blocksharp.__all__)
    assert "EditorSession" in exported
    assert "CSharpGenerator" in exported
    assert "export_script" in exported
    assert "about" in exported
    assert "__version__" in exported
    assert all(hasattr(blocksharp, name) for name in exported)


def test_session_rejects_reserved_names_with_actionable_message() -> None:
    session = blocksharp.EditorSession()
    with pytest.raises(DeclarationError, match="'gameObject' is reserved"):
        session.declare_variable("gameObject", "GameObject")
