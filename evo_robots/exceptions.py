class EvoRobotsError(Exception):
    """Base for all evo_robots exceptions."""

    pass


class ConfigError(EvoRobotsError):
    """Invalid simulation or grid configuration."""

    pass


class SimulationError(EvoRobotsError):
    """A simulation primitive was used out of order."""

    pass
