"""Tests for envelopes and commands."""

from kvbridge.core.types import (
    INVALID_PARAM,
    UNDEFINED,
    Command,
    CommandSpec,
    Outcome,
    ResultEnvelope,
)


def test_envelope_wire_shape():
    assert ResultEnvelope.success().to_dict() == {"result": "success", "data": "undefined"}
    assert ResultEnvelope.invalid_param().to_dict() == {
        "result": "invalid_param",
        "data": "undefined",
    }
    assert ResultEnvelope.failed(INVALID_PARAM).to_dict() == {
        "result": "failed",
        "data": "invalid_param",
    }


def test_envelope_ok():
    assert ResultEnvelope.success(3).ok
    assert not ResultEnvelope.failed().ok
    assert not ResultEnvelope.unavailable().ok


def test_envelope_from_dict():
    envelope = ResultEnvelope.from_dict({"result": "success", "data": ["a", "b"]})
    assert envelope.result is Outcome.SUCCESS
    assert envelope.data == ["a", "b"]

    assert ResultEnvelope.from_dict({"result": "failed"}).data == UNDEFINED


def test_command_from_dict():
    command = Command.from_dict({"method": "setItem", "args": ["a", "1"], "callbackId": "7"})
    assert command.name == "setItem"
    assert command.args == ("a", "1")
    assert command.callback_id == "7"


def test_command_spec_arity():
    assert CommandSpec("setItem", ("string", "string", "function")).arity == 2
    assert CommandSpec("length", ("function",)).arity == 0
