"""
Experiment Module
=================

Two-phase jamming runs and position sweeps:
    - config: dataclass configuration and presets
    - context: three-node topology shared across runs
    - counters: per-run delivery counters
    - jamming: the two-phase experiment engine
    - sweep: receiver/jammer position sweeps with CSV output
"""

from .config import (
    RadioConfig,
    TimingConfig,
    ScenarioConfig,
    SweepConfig,
    ExperimentConfig,
    validate_run,
    get_default_config,
    get_quick_config,
    get_debug_config,
    PRESETS,
)

from .counters import DeliveryCounters, success_rate

from .context import SimulationContext, create_simulation_context

from .jamming import (
    ExperimentPhase,
    JammingExperiment,
    RunResult,
    RunSchedule,
    compute_schedule,
)

from .sweep import (
    ScanAxis,
    SweepPoint,
    SweepResult,
    SweepRunner,
    ScanCsvWriter,
    CSV_COLUMNS,
    DEFAULT_SCAN_DIR,
    parse_axis,
    resolve_csv_path,
    sweep_coordinates,
)
