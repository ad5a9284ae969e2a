"""
SEAMLESS_CORE - Seamless integration setup for directional fields
=================================================================

NO solving. NO field computation. NO plotting.

Structure:
    spec/       - Constants and the integration contract
    builders/   - Small triangle meshes with known topology
    operators/  - Half-edge arrays, permutation group, sparse operators
    analysis/   - Cut graph, transitions, holonomy, setup pipeline

Requirements:
    Python >= 3.9
    numpy >= 1.20
    scipy >= 1.11
"""

import sys

from .spec.constants import MIN_PYTHON, MIN_NUMPY, MIN_SCIPY

if sys.version_info < MIN_PYTHON:
    raise ImportError(f"seamless_core requires Python >= 3.9, got {sys.version}")

import scipy
_scipy_version = tuple(int(p) for p in scipy.__version__.split('.')[:2] if p.isdigit())
if _scipy_version < MIN_SCIPY:
    raise ImportError(f"seamless_core requires scipy >= 1.11, got {scipy.__version__}")

import numpy as np
_numpy_version = tuple(int(p) for p in np.__version__.split('.')[:2] if p.isdigit())
if _numpy_version < MIN_NUMPY:
    raise ImportError(f"seamless_core requires numpy >= 1.20, got {np.__version__}")

from . import builders
from . import operators
from . import spec
from . import analysis

from .spec.structures import IntegrationData, HalfEdgeTopology, TopologyError
from .operators import edge_topology, build_dcel, sign_symmetry, default_period_jumps
from .analysis import setup_integration, cut_mesh_with_singularities

__version__ = "0.1.0"
