"""
Cut Graph and Cut Mesh Tests
============================

Tests:
- cut_mesh_with_singularities opens every mesh to a disk
- sphere / disk without singularities need no seams
- singularities end up on the cut graph
- build_cut_mesh duplicates vertices once per seam sector
- star walks close on interior vertices and open on the boundary

Run: python -m pytest tests/core/test_cut_graph.py -v
"""

import pytest
import numpy as np
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from seamless_core.builders import (
    build_tetrahedron,
    build_octahedron,
    build_grid_disk,
    build_open_cylinder,
    build_torus,
)
from seamless_core.operators import (
    edge_topology,
    build_dcel,
    find_boundary_vertices,
    vertex_valence,
)
from seamless_core.analysis.cut_graph import (
    cut_mesh_with_singularities,
    seam_halfedges,
    seam_edges,
    cut_valence,
    star_start,
    star_halfedges,
    build_cut_mesh,
)
from seamless_core.spec.structures import TopologyError


def cut_pipeline(V, F, singular=(), face2cut=None):
    """Run the cut stages up to the cut mesh."""
    EV, FE, EF = edge_topology(F)
    if face2cut is None:
        face2cut = cut_mesh_with_singularities(V, F, list(singular))
    topo = build_dcel(F, EV, EF, FE)
    is_boundary = find_boundary_vertices(topo, len(V))
    valence = vertex_valence(topo, len(V))
    is_he_cut = seam_halfedges(face2cut, topo)
    is_seam = seam_edges(face2cut, FE, len(EV))
    cut = build_cut_mesh(V, F, topo, is_he_cut, is_boundary, valence)
    return {
        'EV': EV, 'FE': FE, 'EF': EF, 'topo': topo,
        'face2cut': face2cut, 'is_boundary': is_boundary, 'valence': valence,
        'is_he_cut': is_he_cut, 'is_seam': is_seam,
        'cut_valence': cut_valence(is_seam, EV, len(V)),
        'cut': cut,
    }


def cut_euler_characteristic(data):
    """χ of the cut mesh: every seam edge is split in two."""
    n_cut_V = len(data['cut']['cut2whole'])
    n_cut_E = len(data['EV']) + int(data['is_seam'].sum())
    return n_cut_V - n_cut_E + len(data['cut']['cut_F'])


def mark_edges(F, pairs):
    """face2cut marking the undirected vertex pairs given."""
    wanted = {tuple(sorted(p)) for p in pairs}
    face2cut = np.zeros(F.shape, dtype=bool)
    for f in range(len(F)):
        for j in range(3):
            key = tuple(sorted((int(F[f, j]), int(F[f, (j + 1) % 3]))))
            face2cut[f, j] = key in wanted
    return face2cut


# ═══════════════════════════════════════════════════════════════
# SECTION 1: Automatic cut graph
# ═══════════════════════════════════════════════════════════════

class TestAutomaticCut:

    @pytest.mark.parametrize("builder", [build_tetrahedron, build_octahedron, build_grid_disk])
    def test_simply_connected_needs_no_seams(self, builder):
        """Sphere and disk without singularities are already disks after pruning."""
        V, F = builder()
        face2cut = cut_mesh_with_singularities(V, F, [])
        assert face2cut.shape == F.shape
        assert not np.any(face2cut)

    def test_face2cut_is_symmetric(self):
        """Both faces of a seam edge mark it."""
        V, F = build_torus()
        data = cut_pipeline(V, F)
        FE, EF, face2cut = data['FE'], data['EF'], data['face2cut']
        for e in np.where(data['is_seam'])[0]:
            for f in EF[e]:
                j = int(np.where(FE[f] == e)[0][0])
                assert face2cut[f, j]

    def test_singularities_joined_by_path(self):
        """Two singularities on a sphere: a simple path between them."""
        V, F = build_octahedron()
        data = cut_pipeline(V, F, singular=[4, 5])
        cv = data['cut_valence']
        assert cv[4] == 1 and cv[5] == 1
        others = np.delete(cv, [4, 5])
        assert set(others.tolist()) <= {0, 2}
        assert data['is_seam'].sum() >= 2

    def test_torus_cut_graph_has_branch_node(self):
        """Genus 1: two independent loops meet at a node of valence ≥ 3."""
        V, F = build_torus()
        data = cut_pipeline(V, F)
        cv = data['cut_valence']
        assert np.any(data['is_seam'])
        assert not np.any(cv == 1), "dangling seams should be pruned"
        assert cv.max() >= 3
        n_edges, n_nodes = int(data['is_seam'].sum()), int(np.sum(cv > 0))
        assert n_edges - n_nodes + 1 == 2, "cycle rank of the cut graph"

    @pytest.mark.parametrize("builder,singular", [
        (build_torus, []),
        (build_open_cylinder, []),
        (build_octahedron, [0, 5]),
        (lambda: build_torus(8, 5), [3]),
    ])
    def test_cut_mesh_is_disk(self, builder, singular):
        """Cutting along the automatic cut graph gives a topological disk."""
        V, F = builder()
        data = cut_pipeline(V, F, singular=singular)
        assert cut_euler_characteristic(data) == 1

    def test_cylinder_seam_joins_boundaries(self):
        """The cylinder seam is a single path between the two rims."""
        V, F = build_open_cylinder()
        data = cut_pipeline(V, F)
        cv = data['cut_valence']
        interior = ~data['is_boundary']
        assert np.any(data['is_seam'])
        assert set(cv[interior].tolist()) <= {0, 2}
        assert int(np.sum(cv[data['is_boundary']])) == 2


# ═══════════════════════════════════════════════════════════════
# SECTION 2: Cut mesh
# ═══════════════════════════════════════════════════════════════

class TestCutMesh:

    def test_no_seams_keeps_mesh(self):
        """Without seams the cut mesh is the mesh itself."""
        V, F = build_octahedron()
        data = cut_pipeline(V, F, face2cut=np.zeros(F.shape, dtype=bool))
        cut = data['cut']
        assert np.array_equal(cut['cut2whole'], np.arange(len(V)))
        assert np.array_equal(cut['cut_F'], F)
        assert np.allclose(cut['cut_V'], V)

    def test_sector_count(self):
        """Interior vertex with k ≥ 1 seams → k copies; boundary vertex → k + 1."""
        V, F = build_open_cylinder()
        data = cut_pipeline(V, F)
        copies = np.bincount(data['cut']['cut2whole'], minlength=len(V))
        cv = data['cut_valence']
        for v in range(len(V)):
            if data['is_boundary'][v]:
                assert copies[v] == cv[v] + 1
            else:
                assert copies[v] == max(cv[v], 1)

    def test_torus_loop_doubles_loop_vertices(self):
        """A seam loop around the tube duplicates its vertices once."""
        V, F = build_torus(6, 4)
        loop = [(j, (j + 1) % 4) for j in range(4)]
        data = cut_pipeline(V, F, face2cut=mark_edges(F, loop))
        cut = data['cut']
        assert len(cut['cut2whole']) == len(V) + 4
        copies = np.bincount(cut['cut2whole'], minlength=len(V))
        assert np.all(copies[:4] == 2)
        assert np.all(copies[4:] == 1)
        assert cut_euler_characteristic(data) == 0, "torus cut once is an annulus"

    def test_cut_faces_map_back(self):
        """cut2whole[cut_F] = F for every corner."""
        V, F = build_torus()
        cut = cut_pipeline(V, F)['cut']
        assert np.array_equal(cut['cut2whole'][cut['cut_F']], F)
        assert np.allclose(cut['cut_V'], V[cut['cut2whole']])

    def test_non_manifold_vertex_raises(self):
        """Two fans glued at one vertex cannot be walked."""
        V = np.zeros((5, 3))
        F = np.array([[0, 1, 2], [0, 3, 4]])
        with pytest.raises(TopologyError, match="not reached"):
            cut_pipeline(V, F, face2cut=np.zeros(F.shape, dtype=bool))


# ═══════════════════════════════════════════════════════════════
# SECTION 3: Star walks
# ═══════════════════════════════════════════════════════════════

class TestStarWalks:

    def test_interior_star_closes(self):
        V, F = build_octahedron()
        data = cut_pipeline(V, F, face2cut=np.zeros(F.shape, dtype=bool))
        topo = data['topo']
        for v in range(len(V)):
            corners, closed = star_halfedges(v, topo.VH[v], topo, data['valence'][v])
            assert closed
            assert len(corners) == data['valence'][v] == 4
            assert np.all(topo.HV[corners] == v)

    def test_boundary_star_opens(self):
        """Boundary walks start at the rim and leave through the rim."""
        V, F = build_grid_disk(2, 2)
        data = cut_pipeline(V, F)
        topo = data['topo']
        for v in np.where(data['is_boundary'])[0]:
            begin = star_start(v, topo, data['is_he_cut'], True, data['valence'][v])
            assert topo.twin[begin] == -1
            corners, closed = star_halfedges(v, begin, topo, data['valence'][v])
            assert not closed
            assert len(corners) == data['valence'][v]

    def test_interior_start_on_seam(self):
        """Interior vertices on a seam start their walk on a seam half-edge."""
        V, F = build_torus()
        data = cut_pipeline(V, F)
        begin = data['cut']['star_begin']
        for v in np.where(data['cut_valence'] > 0)[0]:
            assert data['is_he_cut'][begin[v]]
