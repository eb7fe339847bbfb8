"""
Core module - Base abstractions and interfaces

Provides foundational components used across the toolkit:
- Configuration management
- Base exception hierarchy
- Event emitters and disposables
- Host collaborator protocols
"""

from minikube_toolkit.core.config import (
    Settings,
    get_minikube_additional_envs,
    get_minikube_home,
    get_minikube_path,
    get_settings,
    reset_settings,
)
from minikube_toolkit.core.events import Disposable, DisposableStore, EventEmitter

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "get_minikube_path",
    "get_minikube_home",
    "get_minikube_additional_envs",
    "Disposable",
    "DisposableStore",
    "EventEmitter",
]
