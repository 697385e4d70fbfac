"""winvm package."""

__all__ = [
    "cli",
    "config",
    "constants",
    "emulator",
    "exceptions",
    "launchers",
    "models",
    "orchestrator",
    "probe",
    "profiles",
    "synthesizer",
    "utils",
    "volume",
]
