# Blueprint takeoff engine: measurements and cost estimates

__version__ = "1.0.0"
