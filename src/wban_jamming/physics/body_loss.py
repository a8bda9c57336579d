"""
Body Attenuation Module
=======================

Additional path loss caused by the human tissue between an implanted node
and the body surface.

Attenuation of a linear dielectric slab (in dB):
    L = (520.8 * pi * sigma / sqrt(eps_r)) * d * n

where:
    sigma = tissue conductivity (S/m)
    eps_r = relative permittivity of the tissue
    d     = layer thickness (m)
    n     = layer multiplier (1 for organ and skin)

The total body loss is the plain sum of the organ, muscle, fat and skin
terms. For muscle and fat the multiplier is the catalog layer count times
the caller override, so both factors scale the term together.

Selective application:
    With no in-body endpoints registered every link is attenuated. Once an
    endpoint is registered only links that touch a registered endpoint are
    attenuated; all other links see 0 dB.

Author: WBAN Jamming Team
"""

import logging
from dataclasses import dataclass
from typing import Optional, Set

import numpy as np

from .tissue import BodyOrganOption, TissueProfile, get_profile

logger = logging.getLogger(__name__)

# Attenuation constant prefactor (dB)
ATTENUATION_COEFFICIENT = 520.8 * np.pi


@dataclass(frozen=True)
class LayerLosses:
    """Per-layer attenuation breakdown in dB."""

    organ: float
    muscle: float
    fat: float
    skin: float

    @property
    def total(self) -> float:
        return self.organ + self.skin + self.fat + self.muscle


def layer_loss_db(
    conductivity: float,
    permittivity: float,
    thickness: float,
    multiplier: float = 1.0,
) -> float:
    """
    Attenuation of one tissue layer in dB.

    Args:
        conductivity: Layer conductivity (S/m)
        permittivity: Relative permittivity, must be > 0
        thickness: Layer thickness (m)
        multiplier: Number of stacked layers

    Returns:
        Loss in dB (>= 0 for physical inputs)
    """
    return float(
        ATTENUATION_COEFFICIENT * conductivity / np.sqrt(permittivity)
        * thickness * multiplier
    )


def compute_layer_losses(
    profile: TissueProfile,
    fat_layer: int = 1,
    muscle_layer: int = 1,
) -> LayerLosses:
    """
    Compute the four layer losses of a tissue stack.

    Args:
        profile: Dielectric profile of the stack
        fat_layer: Fat layer override, multiplied into the catalog count
        muscle_layer: Muscle layer override, multiplied into the catalog count

    Returns:
        LayerLosses with organ, muscle, fat and skin terms

    Example:
        >>> losses = compute_layer_losses(get_profile(BodyOrganOption.HEART_402_MHZ))
        >>> round(losses.total, 2)
        6.51
    """
    organ = layer_loss_db(
        profile.organ_conductivity,
        profile.organ_permittivity,
        profile.organ_thickness,
    )
    muscle = layer_loss_db(
        profile.muscle_conductivity,
        profile.muscle_permittivity,
        profile.muscle_thickness,
        profile.muscle_layers * muscle_layer,
    )
    fat = layer_loss_db(
        profile.fat_conductivity,
        profile.fat_permittivity,
        profile.fat_thickness,
        profile.fat_layers * fat_layer,
    )
    skin = layer_loss_db(
        profile.skin_conductivity,
        profile.skin_permittivity,
        profile.skin_thickness,
    )
    return LayerLosses(organ=organ, muscle=muscle, fat=fat, skin=skin)


class BodyPropagationLossModel:
    """
    Tissue attenuation applied on top of the distance-based path loss.

    Attributes:
        body_option: Currently selected catalog key
        profile: TissueProfile for body_option
        fat_layer: Fat layer override (default 1)
        muscle_layer: Muscle layer override (default 1)

    Example:
        >>> model = BodyPropagationLossModel(BodyOrganOption.HEART_402_MHZ)
        >>> implant, hub, jammer = 0, 1, 2
        >>> model.register_in_body(implant)
        >>> round(model.calc_rx_power(-16.0, implant, hub), 2)
        -22.51
        >>> model.calc_rx_power(-16.0, jammer, hub)
        -16.0
    """

    def __init__(self, body_option: BodyOrganOption = BodyOrganOption.SMALL_INTESTINE_402_MHZ):
        self._fat_layer = 1
        self._muscle_layer = 1
        self._in_body: Set[int] = set()
        self.set_body_option(body_option)

    # -------------------------------------------------------------------------
    # Profile and layer configuration
    # -------------------------------------------------------------------------

    def set_body_option(self, body_option: BodyOrganOption):
        """Select the organ/frequency profile used for subsequent links."""
        self.body_option = body_option
        self.profile = get_profile(body_option)

    @property
    def fat_layer(self) -> int:
        return self._fat_layer

    @fat_layer.setter
    def fat_layer(self, value: int):
        self._fat_layer = _check_layer_count("fat_layer", value)
        logger.debug("new fat layer = %d", self._fat_layer)

    @property
    def muscle_layer(self) -> int:
        return self._muscle_layer

    @muscle_layer.setter
    def muscle_layer(self, value: int):
        self._muscle_layer = _check_layer_count("muscle_layer", value)
        logger.debug("new muscle layer = %d", self._muscle_layer)

    # -------------------------------------------------------------------------
    # In-body endpoints
    # -------------------------------------------------------------------------

    def register_in_body(self, handle: int):
        """
        Mark a position handle as located inside the body.

        The first registration switches the model to selective mode: from
        then on only links touching a registered handle are attenuated.
        """
        self._in_body.add(handle)

    def clear_in_body(self):
        """Forget all in-body handles and attenuate every link again."""
        self._in_body.clear()

    @property
    def in_body(self) -> frozenset:
        return frozenset(self._in_body)

    @property
    def selective(self) -> bool:
        return bool(self._in_body)

    def should_apply(self, a: int, b: int) -> bool:
        """Whether the body loss applies to the link between a and b."""
        if not self._in_body:
            return True
        return a in self._in_body or b in self._in_body

    # -------------------------------------------------------------------------
    # Loss computation
    # -------------------------------------------------------------------------

    def layer_losses(self, profile: Optional[TissueProfile] = None) -> LayerLosses:
        """Layer breakdown for a profile (default: the active one)."""
        profile = self.profile if profile is None else profile
        losses = compute_layer_losses(profile, self._fat_layer, self._muscle_layer)
        logger.debug(
            "layer of fat = %d & layer of muscle = %d",
            profile.fat_layers * self._fat_layer,
            profile.muscle_layers * self._muscle_layer,
        )
        logger.debug(
            "organ loss = %.4f, muscle loss = %.4f, fat loss = %.4f, skin loss = %.4f",
            losses.organ, losses.muscle, losses.fat, losses.skin,
        )
        return losses

    def additional_loss_db(
        self,
        a: int,
        b: int,
        profile: Optional[TissueProfile] = None,
    ) -> float:
        """
        Additional loss in dB for the link between a and b.

        Args:
            a: Position handle of one endpoint
            b: Position handle of the other endpoint
            profile: Profile to evaluate (default: the active one)

        Returns:
            Total layer loss, or 0.0 when the link does not touch the body
        """
        if not self.should_apply(a, b):
            return 0.0
        total = self.layer_losses(profile).total
        logger.debug("loss due to body in db is = %.4f", total)
        return total

    def calc_rx_power(self, tx_power_dbm: float, a: int, b: int) -> float:
        """Received power in dBm after tissue attenuation."""
        return tx_power_dbm - self.additional_loss_db(a, b)


def _check_layer_count(name: str, value: int) -> int:
    if isinstance(value, bool) or int(value) != value or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return int(value)
