"""Volume builder — binds a shape and a material under a unique name."""

from __future__ import annotations

import logging

from collsim.errors import DuplicateVolumeName
from collsim.models.geometry import Shape, Volume
from collsim.models.material import Material

logger = logging.getLogger(__name__)


class VolumeBuilder:
    """Creates volumes for one assembly run.

    Names are unique within a run. Building the same (name, shape,
    material) twice returns the existing volume; reusing a name for a
    different volume raises DuplicateVolumeName.
    """

    def __init__(self) -> None:
        self._volumes: dict[str, Volume] = {}

    def build(self, name: str, shape: Shape, material: Material) -> Volume:
        if not name:
            raise ValueError("Volume name must be non-empty")
        existing = self._volumes.get(name)
        if existing is not None:
            if existing.shape == shape and existing.material is material:
                return existing
            raise DuplicateVolumeName(name)
        volume = Volume(name=name, shape=shape, material=material)
        self._volumes[name] = volume
        logger.debug("Built volume %s: %s in %s", name, shape, material.id)
        return volume

    def get(self, name: str) -> Volume:
        """Return a built volume by name.

        Raises:
            KeyError: If no volume of that name was built.
        """
        try:
            return self._volumes[name]
        except KeyError:
            raise KeyError(f"Unknown volume: {name!r}")

    def volumes(self) -> list[Volume]:
        """All built volumes, in build order."""
        return list(self._volumes.values())

    def __contains__(self, name: object) -> bool:
        return name in self._volumes

    def __len__(self) -> int:
        return len(self._volumes)
