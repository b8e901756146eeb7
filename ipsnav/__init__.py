"""
ipsnav: indoor pedestrian localization and navigation.

Fuses Wi-Fi fingerprint fixes with pedestrian dead reckoning in a Kalman
filter and guides the user over a static floor graph with A* routes and
turn-by-turn instructions.

Subpackages:
    graph: floor graph model and loader
    fingerprinting: weighted k-NN Wi-Fi localization
    sensors: heading tracking and step detection
    estimators: fusion Kalman filter
    fusion: displacement gate, periodic correction, LocalizationEngine
    planning: A*, routes, off-route replanning, instructions
    eval: offline error metrics and plots
"""

__version__ = "0.1.0"
