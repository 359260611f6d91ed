"""Client controller for the tone formatter service."""

from tone_formatter.client.controller import ToneFormatterController
from tone_formatter.client.state import ClientStateMachine, ControllerState

__all__ = ["ClientStateMachine", "ControllerState", "ToneFormatterController"]
