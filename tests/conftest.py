import os
import sys
from pathlib import Path

# No background sweeps or real credentials during tests
os.environ.setdefault("SESSION_SWEEP_ENABLED", "0")

sys.path.append(str(Path(__file__).resolve().parents[1]))
