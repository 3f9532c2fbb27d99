"""
Input/Output Manager (HDF5 + JSON)
Handles the project library (.h5), the last-session settings file and share URLs.

Library layout:
    /projects/<name>        attrs: settings_json, timestamp, version
    /projects/<name>/preview    optional (H, W, 3) uint8 image
    /captures/<id>          (H, W, 3) uint8 image, attrs: timestamp, project_name
"""
from __future__ import annotations

from dataclasses import dataclass
from importlib.metadata import version, PackageNotFoundError
from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING
from urllib.parse import parse_qs, quote, urlencode, urlsplit
import json
import logging
import os
import time

import h5py
import numpy as np

from circlematrix.config import PROJECT, PROJECTS_PATH, SETTINGS_PATH
from circlematrix.model.state import ProjectState

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("circlematrix")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

SHARE_PARAM = "project"


@dataclass
class ProjectEntry:
    """A named project as stored in the library."""
    name: str
    settings: Dict[str, Any]
    timestamp: float
    preview: Optional[npt.NDArray[np.uint8]] = None


def _check_name(name: str) -> None:
    if not name or "/" in name or name in (".", ".."):
        raise ValueError(f"Invalid project name '{name}'.")


def _ensure_parent(filepath: str) -> None:
    parent = os.path.dirname(os.path.abspath(filepath))
    os.makedirs(parent, exist_ok=True)


def _read_attr_str(attrs: h5py.AttributeManager, key: str) -> str:
    val = attrs[key]
    if isinstance(val, bytes):
        return val.decode('utf-8')
    return str(val)


class IOManager:

    # ------------------------------------------------------------------
    # Project library
    # ------------------------------------------------------------------

    @staticmethod
    def save_project(
        state: ProjectState,
        name: str,
        filepath: str = PROJECTS_PATH,
        preview: Optional[npt.NDArray[np.uint8]] = None
    ) -> ProjectEntry:
        """Store the current settings record under `name`, overwriting an existing entry."""
        _check_name(name)
        logger.info(f"Saving project '{name}' to: {filepath}")
        record = state.to_record()
        entry = ProjectEntry(name=name, settings=record, timestamp=time.time(), preview=preview)
        try:
            _ensure_parent(filepath)
            with h5py.File(filepath, "a") as f:
                grp_projects = f.require_group("projects")
                if name in grp_projects:
                    del grp_projects[name]
                grp = grp_projects.create_group(name)
                grp.attrs["settings_json"] = json.dumps(record)
                grp.attrs["timestamp"] = entry.timestamp
                grp.attrs["version"] = APP_VERSION
                if preview is not None:
                    grp.create_dataset("preview", data=np.asarray(preview, dtype=np.uint8), compression="gzip")
        except Exception as e:
            logger.exception(f"Failed to save project: {e}")
            raise e

        state.active_project = name
        state.project_name = name
        state.filepath = filepath
        return entry

    @staticmethod
    def load_project(state: ProjectState, name: str, filepath: str = PROJECTS_PATH) -> ProjectEntry:
        """Apply a stored project's record (settings + colour seed) to `state`."""
        entry = IOManager.get_project(name, filepath)
        state.apply_record(entry.settings)
        state.active_project = name
        state.project_name = name
        state.filepath = filepath
        logger.info(f"Loaded project '{name}' (seed {state.color_seed}).")
        return entry

    @staticmethod
    def get_project(name: str, filepath: str = PROJECTS_PATH) -> ProjectEntry:
        with IOManager._open_library(filepath) as f:
            grp_projects = f.get("projects")
            if grp_projects is None or name not in grp_projects:
                raise KeyError(f"Project '{name}' not found.")
            return IOManager._read_entry(name, grp_projects[name], with_preview=True)

    @staticmethod
    def list_projects(filepath: str = PROJECTS_PATH) -> List[ProjectEntry]:
        """All projects, oldest first. Previews are not loaded."""
        if not os.path.exists(filepath):
            return []
        with IOManager._open_library(filepath) as f:
            grp_projects = f.get("projects")
            if grp_projects is None:
                return []
            entries = [
                IOManager._read_entry(name, grp, with_preview=False)
                for name, grp in grp_projects.items()
            ]
        return sorted(entries, key=lambda e: e.timestamp)

    @staticmethod
    def delete_project(name: str, filepath: str = PROJECTS_PATH, state: Optional[ProjectState] = None) -> None:
        with h5py.File(filepath, "a") as f:
            grp_projects = f.get("projects")
            if grp_projects is None or name not in grp_projects:
                raise KeyError(f"Project '{name}' not found.")
            del grp_projects[name]
        logger.info(f"Deleted project '{name}'.")
        if state is not None and state.active_project == name:
            state.active_project = None

    @staticmethod
    def rename_project(
        old_name: str,
        new_name: str,
        filepath: str = PROJECTS_PATH,
        state: Optional[ProjectState] = None
    ) -> None:
        _check_name(new_name)
        with h5py.File(filepath, "a") as f:
            grp_projects = f.get("projects")
            if grp_projects is not None and new_name in grp_projects:
                raise ValueError(f"Project '{new_name}' already exists.")
            if grp_projects is None or old_name not in grp_projects:
                raise KeyError(f"Project '{old_name}' not found.")
            grp_projects.move(old_name, new_name)
            grp_projects[new_name].attrs["timestamp"] = time.time()
        logger.info(f"Renamed project '{old_name}' -> '{new_name}'.")
        if state is not None and state.active_project == old_name:
            state.active_project = new_name
            state.project_name = new_name

    @staticmethod
    def _open_library(filepath: str) -> h5py.File:
        if not os.path.exists(filepath):
            raise KeyError(f"Project library '{filepath}' does not exist.")
        if not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)
        return h5py.File(filepath, "r")

    @staticmethod
    def _read_entry(name: str, grp: h5py.Group, with_preview: bool) -> ProjectEntry:
        settings = json.loads(_read_attr_str(grp.attrs, "settings_json"))
        timestamp = float(grp.attrs.get("timestamp", 0.0))
        preview = None
        if with_preview and "preview" in grp:
            preview = np.asarray(grp["preview"][()], dtype=np.uint8)
        return ProjectEntry(name=name, settings=settings, timestamp=timestamp, preview=preview)

    # ------------------------------------------------------------------
    # Captures
    # ------------------------------------------------------------------

    @staticmethod
    def save_capture(
        image: npt.NDArray[np.uint8],
        filepath: str = PROJECTS_PATH,
        project_name: str = "",
        max_captures: int = PROJECT["MAX_CAPTURES"]
    ) -> str:
        """Store a screenshot; the oldest captures are dropped beyond `max_captures`."""
        _ensure_parent(filepath)
        timestamp = time.time()
        with h5py.File(filepath, "a") as f:
            grp_caps = f.require_group("captures")
            index = int(grp_caps.attrs.get("next_index", 0))
            key = f"{index:08d}"
            ds = grp_caps.create_dataset(key, data=np.asarray(image, dtype=np.uint8), compression="gzip")
            ds.attrs["timestamp"] = timestamp
            ds.attrs["project_name"] = project_name
            grp_caps.attrs["next_index"] = index + 1

            # keys are zero padded, so lexical order is insertion order
            stale = sorted(grp_caps.keys())[:-max_captures] if max_captures > 0 else list(grp_caps.keys())
            for old in stale:
                del grp_caps[old]
            if stale:
                logger.debug(f"Dropped {len(stale)} old captures.")
        logger.info(f"Capture '{key}' saved.")
        return key

    @staticmethod
    def list_captures(filepath: str = PROJECTS_PATH) -> List[str]:
        if not os.path.exists(filepath):
            return []
        with IOManager._open_library(filepath) as f:
            grp_caps = f.get("captures")
            return sorted(grp_caps.keys()) if grp_caps is not None else []

    @staticmethod
    def load_capture(key: str, filepath: str = PROJECTS_PATH) -> npt.NDArray[np.uint8]:
        with IOManager._open_library(filepath) as f:
            grp_caps = f.get("captures")
            if grp_caps is None or key not in grp_caps:
                raise KeyError(f"Capture '{key}' not found.")
            return np.asarray(grp_caps[key][()], dtype=np.uint8)

    # ------------------------------------------------------------------
    # Last-session settings (JSON)
    # ------------------------------------------------------------------

    @staticmethod
    def save_settings_json(state: ProjectState, filepath: str = SETTINGS_PATH) -> None:
        _ensure_parent(filepath)
        with open(filepath, "w", encoding="utf-8") as fh:
            json.dump(state.to_record(), fh, indent=2)
        logger.debug(f"Settings saved to: {filepath}")

    @staticmethod
    def load_settings_json(state: ProjectState, filepath: str = SETTINGS_PATH) -> bool:
        """Restore the last session. Returns False when there is nothing usable to restore."""
        if not os.path.exists(filepath):
            return False
        try:
            with open(filepath, "r", encoding="utf-8") as fh:
                record = json.load(fh)
            state.apply_record(record)
        except (OSError, ValueError) as e:
            # SettingsError and JSONDecodeError are both ValueErrors
            logger.warning(f"Failed to load settings from '{filepath}': {e}")
            return False
        logger.info(f"Settings restored from: {filepath}")
        return True


# ------------------------------------------------------------------------------
# URL sharing
# ------------------------------------------------------------------------------
def build_share_url(record: Mapping[str, Any], base_url: str = PROJECT["SHARE_BASE_URL"]) -> str:
    """Encode a settings record into a `?project=<json>` URL."""
    payload = json.dumps(dict(record), separators=(",", ":"))
    return f"{base_url}?{urlencode({SHARE_PARAM: payload}, quote_via=quote)}"


def parse_share_url(url: str) -> Optional[Dict[str, Any]]:
    """Decode the settings record of a share URL, or None if the URL carries none."""
    query = parse_qs(urlsplit(url).query)
    values = query.get(SHARE_PARAM)
    if not values:
        return None
    try:
        record = json.loads(values[0])
    except json.JSONDecodeError as e:
        logger.error(f"Error loading project from URL: {e}")
        return None
    if not isinstance(record, dict):
        logger.error("Shared project payload is not an object.")
        return None
    return record
