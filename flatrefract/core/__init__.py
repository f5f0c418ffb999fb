"""
Scene orchestration: frames, pacing and view state.
"""

from flatrefract.core.scene import FrameResult, FrameThrottle, Scene
from flatrefract.core.view import ViewState

__all__ = ["FrameResult", "FrameThrottle", "Scene", "ViewState"]
