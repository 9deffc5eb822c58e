"""VoxFoyer - Vocal Command Interpretation Engine

Turns transcribed French household instructions into structured tasks with
a category, target child, urgency, deadline and calibrated confidence.
"""

__version__ = "0.1.0"
__app_name__ = "VoxFoyer"
