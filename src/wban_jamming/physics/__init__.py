"""
Physics Module
==============

RF propagation through and around the human body:
    - tissue: dielectric catalog of organ/frequency tissue stacks
    - body_loss: selective tissue attenuation model
    - propagation: log-distance path loss and dBm/Watt conversions
"""

from .tissue import (
    BodyOrganOption,
    TissueProfile,
    TISSUE_PROFILES,
    DEFAULT_ORGAN,
    get_profile,
    parse_organ,
    organ_name,
    available_organs,
)

from .body_loss import (
    LayerLosses,
    BodyPropagationLossModel,
    layer_loss_db,
    compute_layer_losses,
)

from .propagation import (
    LogDistancePropagationLossModel,
    dbm_to_watts,
    watts_to_dbm,
    noise_power_dbm,
    log_distance_loss_db,
    crossover_distance,
)
