"""VisionPlan scheduling engine: calendars, constraints, resources, rates and scenarios."""

__version__ = "0.1.0"
