"""
Scene Controllers
=================
Drive the model: regenerate the grid, recompute poses, run the rotation
animation and swap shapes while it runs.

Why is this file needed?
------------------------
1. Orchestration: `SceneController` owns the grid units and every render-side
   resource they hold, and decides what a settings change has to rebuild.
2. Scheduling: All time-dependent work runs through a `FrameScheduler`, one
   cancellable callback per frame, on a single thread.

Note: This package should be pure Python/NumPy and should NOT import PySide6.
The Qt scheduler and the PyVista adapter live in the view layer.
"""
