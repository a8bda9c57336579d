"""
WBAN Jamming Resistance Simulator
=================================

Evaluates how resistant an implant-to-hub wireless body-area link is to an
external radio jammer.

Modules:
    - physics: tissue dielectric catalog, body attenuation, path loss
    - channel: positions, packets, spectrum channel, transceiver PHY
    - experiment: configuration, two-phase jamming run, position sweep
"""

__version__ = "1.0.0"
__author__ = "WBAN Jamming Team"
