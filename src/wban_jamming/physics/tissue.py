"""
Tissue Dielectric Profiles
==========================

Static catalog of dielectric parameters for the tissue stack between an
implanted transmitter and the body surface.

Each profile describes four layers (organ, muscle, fat, skin) at one
operating frequency:
    - conductivity (S/m)
    - relative permittivity (dimensionless)
    - thickness (m)
    - built-in layer count (muscle and fat only)

Profiles are keyed by BodyOrganOption. The catalog is closed: there is
exactly one profile per option and nothing is registered at runtime.

Author: WBAN Jamming Team
"""

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping

logger = logging.getLogger(__name__)


class BodyOrganOption(Enum):
    """Organ / frequency combinations available in the catalog."""

    SMALL_INTESTINE_2400_MHZ = 0
    SMALL_INTESTINE_916_5_MHZ = 1
    FAT_2400_MHZ = 2
    FAT_402_MHZ = 3
    SKIN_2400_MHZ = 4
    SKIN_863_MHZ = 5
    SKIN_402_MHZ = 6
    LARGE_INTESTINE_2400_MHZ = 7
    SMALL_INTESTINE_402_MHZ = 8
    HEART_2400_MHZ = 9
    KIDNEY_2400_MHZ = 10
    HEART_402_MHZ = 11
    KIDNEY_402_MHZ = 12


@dataclass(frozen=True)
class TissueProfile:
    """Dielectric parameters of one organ/frequency tissue stack."""

    organ_conductivity: float
    organ_permittivity: float
    organ_thickness: float
    muscle_conductivity: float
    muscle_permittivity: float
    muscle_thickness: float
    muscle_layers: int
    fat_conductivity: float
    fat_permittivity: float
    fat_thickness: float
    fat_layers: int
    skin_conductivity: float
    skin_permittivity: float
    skin_thickness: float
    frequency_mhz: float


# =============================================================================
# CATALOG
# =============================================================================

# Layers that do not take part in a stack carry conductivity 1, permittivity 1
# and thickness 0, so they contribute exactly 0 dB.
_PROFILES: Dict[BodyOrganOption, TissueProfile] = {
    BodyOrganOption.SMALL_INTESTINE_2400_MHZ: TissueProfile(
        3.1335, 54.527, 0.01,
        1.705, 52.791, 0.012, 1,
        0.10235, 5.2853, 0.046, 1,
        1.4407, 38.063, 0.0013,
        2400.0,
    ),
    BodyOrganOption.SMALL_INTESTINE_916_5_MHZ: TissueProfile(
        2.1738, 59.379, 0.01,
        0.94861, 54.994, 0.012, 1,
        0.051438, 5.4594, 0.046, 1,
        0.87219, 41.322, 0.0013,
        916.5,
    ),
    BodyOrganOption.FAT_2400_MHZ: TissueProfile(
        1.0, 1.0, 0.0,
        1.0, 1.0, 0.0, 0,
        0.10235, 5.2853, 0.046, 2,
        1.4407, 38.063, 0.0013,
        2400.0,
    ),
    BodyOrganOption.FAT_402_MHZ: TissueProfile(
        1.0, 1.0, 0.0,
        1.0, 1.0, 0.0, 0,
        0.041151, 5.5789, 0.046, 2,
        0.68892, 46.741, 0.0013,
        402.0,
    ),
    BodyOrganOption.SKIN_2400_MHZ: TissueProfile(
        1.0, 1.0, 0.0,
        1.0, 1.0, 0.0, 0,
        1.0, 1.0, 0.0, 0,
        1.4407, 38.063, 0.0013,
        2400.0,
    ),
    BodyOrganOption.SKIN_863_MHZ: TissueProfile(
        1.0, 1.0, 0.0,
        1.0, 1.0, 0.0, 0,
        1.0, 1.0, 0.0, 0,
        0.85451, 41.603, 0.0013,
        863.0,
    ),
    BodyOrganOption.SKIN_402_MHZ: TissueProfile(
        1.0, 1.0, 0.0,
        1.0, 1.0, 0.0, 0,
        1.0, 1.0, 0.0, 0,
        0.68892, 46.741, 0.0013,
        402.0,
    ),
    BodyOrganOption.LARGE_INTESTINE_2400_MHZ: TissueProfile(
        1.3739, 51.877, 0.02,
        1.705, 52.791, 0.012, 1,
        0.10235, 5.2853, 0.046, 1,
        1.4407, 38.063, 0.0013,
        2400.0,
    ),
    BodyOrganOption.SMALL_INTESTINE_402_MHZ: TissueProfile(
        1.9035, 66.086, 0.01,
        0.79682, 57.112, 0.012, 1,
        0.041151, 5.5789, 0.046, 1,
        0.68892, 46.741, 0.0013,
        402.0,
    ),
    BodyOrganOption.HEART_2400_MHZ: TissueProfile(
        2.2159, 54.918, 0.015,
        1.705, 52.791, 0.012, 1,
        0.10235, 5.2853, 0.046, 1,
        1.4407, 38.063, 0.0013,
        2400.0,
    ),
    BodyOrganOption.KIDNEY_2400_MHZ: TissueProfile(
        2.3901, 52.856, 0.01,
        1.705, 52.791, 0.012, 1,
        0.10235, 5.2853, 0.046, 1,
        1.4407, 38.063, 0.0013,
        2400.0,
    ),
    BodyOrganOption.HEART_402_MHZ: TissueProfile(
        0.96577, 66.049, 0.015,
        0.79682, 57.112, 0.012, 1,
        0.041151, 5.5789, 0.046, 1,
        0.68892, 46.741, 0.0013,
        402.0,
    ),
    BodyOrganOption.KIDNEY_402_MHZ: TissueProfile(
        1.0958, 66.361, 0.01,
        0.79682, 57.112, 0.012, 1,
        0.041151, 5.5789, 0.046, 1,
        0.68892, 46.741, 0.0013,
        402.0,
    ),
}

TISSUE_PROFILES: Mapping[BodyOrganOption, TissueProfile] = MappingProxyType(_PROFILES)

DEFAULT_ORGAN = BodyOrganOption.HEART_402_MHZ

ORGAN_NAMES: Mapping[BodyOrganOption, str] = MappingProxyType({
    BodyOrganOption.SMALL_INTESTINE_2400_MHZ: "small-intestine-2400",
    BodyOrganOption.SMALL_INTESTINE_916_5_MHZ: "small-intestine-916.5",
    BodyOrganOption.FAT_2400_MHZ: "fat-2400",
    BodyOrganOption.FAT_402_MHZ: "fat-402",
    BodyOrganOption.SKIN_2400_MHZ: "skin-2400",
    BodyOrganOption.SKIN_863_MHZ: "skin-863",
    BodyOrganOption.SKIN_402_MHZ: "skin-402",
    BodyOrganOption.LARGE_INTESTINE_2400_MHZ: "large-intestine-2400",
    BodyOrganOption.SMALL_INTESTINE_402_MHZ: "small-intestine-402",
    BodyOrganOption.HEART_2400_MHZ: "heart-2400",
    BodyOrganOption.KIDNEY_2400_MHZ: "kidney-2400",
    BodyOrganOption.HEART_402_MHZ: "heart-402",
    BodyOrganOption.KIDNEY_402_MHZ: "kidney-402",
})

# Accepted spellings; "heart" alone means the 402 MHz profile.
_NAME_LOOKUP: Mapping[str, BodyOrganOption] = MappingProxyType({
    "heart": BodyOrganOption.HEART_402_MHZ,
    **{name: option for option, name in ORGAN_NAMES.items()},
})


# =============================================================================
# LOOKUP
# =============================================================================

def get_profile(option: BodyOrganOption) -> TissueProfile:
    """
    Return the dielectric profile for an organ option.

    Args:
        option: Catalog key

    Returns:
        The immutable TissueProfile for that key

    Example:
        >>> get_profile(BodyOrganOption.HEART_402_MHZ).frequency_mhz
        402.0
    """
    return TISSUE_PROFILES[option]


def parse_organ(name: str) -> BodyOrganOption:
    """
    Parse a human-readable organ name such as "Heart-402".

    Matching is case-insensitive. Unknown names are not an error: the
    default heart-402 profile is returned and a warning is logged, so that
    existing experiment scripts keep running.

    Args:
        name: Organ name from the command line or a config file

    Returns:
        The matching BodyOrganOption, or DEFAULT_ORGAN
    """
    option = _NAME_LOOKUP.get(name.strip().lower())
    if option is None:
        logger.warning(
            "Unknown organ option '%s', using default %s",
            name, ORGAN_NAMES[DEFAULT_ORGAN],
        )
        return DEFAULT_ORGAN
    return option


def organ_name(option: BodyOrganOption) -> str:
    """Canonical name of an organ option, e.g. "kidney-2400"."""
    return ORGAN_NAMES[option]


def available_organs() -> list:
    """All canonical organ names in catalog order."""
    return [ORGAN_NAMES[option] for option in BodyOrganOption]
