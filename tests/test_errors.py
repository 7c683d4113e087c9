import pytest

from dungeoncrawl.sim.errors import ErrorId, GameError, chain_err


def test_chain_err_builds_causal_path_from_innermost_fault() -> None:
    with pytest.raises(GameError) as excinfo:
        with chain_err("outer"):
            with chain_err("inner"):
                raise ErrorId.INDEX.into_with("(3, 4)")

    error = excinfo.value
    assert error.kind is ErrorId.INDEX
    assert error.causal_path() == ("Invalid index access: (3, 4)", "inner", "outer")
    assert str(error) == "Invalid index access: (3, 4) <- inner <- outer"


def test_error_without_detail_uses_short_message() -> None:
    error = ErrorId.INCOMPLETE_INPUT.error()

    assert error.headline() == "Incomplete input"
    assert error.contexts == []


def test_only_input_errors_are_recoverable() -> None:
    recoverable = {kind for kind in ErrorId if kind.error().is_recoverable}

    assert recoverable == {ErrorId.INPUT, ErrorId.INCOMPLETE_INPUT}


def test_chain_err_leaves_other_exceptions_alone() -> None:
    with pytest.raises(ValueError, match="plain"):
        with chain_err("ignored"):
            raise ValueError("plain")
