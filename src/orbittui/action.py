"""Abstract actions the controller understands."""

from enum import Enum


class Action(Enum):
    QUIT = "quit"
    TICK = "tick"
    RENDER = "render"
    NAVIGATE_UP = "navigate_up"
    NAVIGATE_DOWN = "navigate_down"
    SELECT = "select"
    BACK = "back"
    TOGGLE_SUPERGRAPH = "toggle_supergraph"
