"""
Project State (Data Model)
==========================
This module defines the central data structure for the running application.

Why is this file needed?
------------------------
1. State Management: It holds the current settings snapshot and the colour seed
   in one place.
2. Persistence: `to_record()` is what gets serialized when saving or sharing a
   project; `apply_record()` is the only way a stored record comes back in.
3. Decoupling: Views read from this object; the scene controller writes to it.

Classes:
    ProjectState: The main container class.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
import logging

from circlematrix.model.colors import new_color_seed
from circlematrix.model.settings import Settings, SettingsError, SEED_KEY

logger = logging.getLogger(__name__)


@dataclass
class ProjectState:
    """
    Holds the entire state of the open project.
    Pass this instance to your Controllers and Views.
    """
    project_name: str = "Untitled Project"
    filepath: Optional[str] = None
    active_project: Optional[str] = None

    settings: Settings = field(default_factory=Settings)
    color_seed: int = field(default_factory=new_color_seed)

    def reset(self) -> None:
        """Back to default settings with a fresh colour seed."""
        self.project_name = "Untitled Project"
        self.filepath = None
        self.active_project = None
        self.settings = Settings()
        self.color_seed = new_color_seed()
        logger.info("Project state has been reset.")

    def regenerate_seed(self) -> int:
        self.color_seed = new_color_seed()
        logger.info(f"New colour seed: {self.color_seed}")
        return self.color_seed

    def to_record(self) -> Dict[str, Any]:
        """Flat settings record including the colour seed. Camera state is never included."""
        record = self.settings.to_record()
        record[SEED_KEY] = self.color_seed
        return record

    def apply_record(self, record: Mapping[str, Any]) -> None:
        """
        Replace settings (and the colour seed, if present) from a record.
        Missing keys fall back to the defaults, not to the current values.
        The state is left untouched when the record is rejected.
        """
        settings = Settings.from_record(record)
        seed = record.get(SEED_KEY)
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise SettingsError(f"'{SEED_KEY}' must be an integer, got {seed!r}.")

        self.settings = settings
        if seed is not None:
            self.color_seed = seed
        else:
            self.color_seed = new_color_seed()
            logger.warning(f"Record has no colour seed; using random seed {self.color_seed}.")
