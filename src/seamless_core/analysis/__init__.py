"""
Analysis functions - depend on operators layer.

Separated from operators to maintain clean layering:
    analysis → operators → spec

Includes:
- cut_graph: seam marking, star walks, cut mesh
- transitions: path-level period-jump variables
- holonomy: matching composed around vertex stars, constraint rows
- setup_integration: the full pipeline → IntegrationData
"""

from .cut_graph import (
    cut_mesh_with_singularities,
    seam_halfedges,
    seam_edges,
    cut_valence,
    star_start,
    star_halfedges,
    build_cut_mesh,
)
from .transitions import halfedge_matching, is_cut_node, trace_transitions
from .holonomy import walk_vertex_branches, clean_branches, assemble_holonomy_constraints
from .setup_integration import setup_integration
