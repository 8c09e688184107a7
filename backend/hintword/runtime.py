"""Process-scoped game runtime shared by socket handlers and HTTP routes."""

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from .game.registry import LobbyRegistry
from .realtime.gateway import BroadcastGateway
from .realtime.timers import RoundTimerCoordinator

EXTENSION_KEY = "hintword"


@dataclass
class GameRuntime:
    registry: LobbyRegistry
    timers: RoundTimerCoordinator
    gateway: BroadcastGateway


def get_runtime(app: Flask | None = None) -> GameRuntime:
    return (app or current_app).extensions[EXTENSION_KEY]
