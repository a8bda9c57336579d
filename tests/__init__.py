"""
WBAN Jamming Tests Package
==========================

Unit and end-to-end tests:
    - test_tissue: dielectric catalog and organ name parsing
    - test_body_loss: layer attenuation and selective body loss
    - test_propagation: log-distance path loss and unit conversions
    - test_phy: transceiver locking, SINR and state handling
    - test_counters: delivery counters and source tags
    - test_config: dataclass configuration and presets
    - test_jamming_experiment: two-phase runs end to end
    - test_sweep: position sweeps and CSV output
    - test_cli: command line entry point
    - test_docstrings: runnable docstring examples
"""
