"""
@file topology.py
@brief Endpoint connectivity of the reference road network

@details
Roads are nodes; two roads are joined by an edge when any of their endpoint
pairings lies within the bridging threshold, the same rule the path
reconciler uses to flag gaps. Connected components of this graph show how
fragmented the loaded network is: a network split into many components will
produce many gap flags on reconciled trajectories.

Pairwise comparison is O(R^2) and is intended for the municipal-scale
networks served by one instance.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0

@see services.path_reconciler.roads_are_connected
"""

import logging
from typing import Any, Dict, Sequence

import networkx as nx

from roadwatch.models.road_network import RoadSegment
from roadwatch.services.path_reconciler import DEFAULT_BRIDGE_THRESHOLD_M, roads_are_connected

logger = logging.getLogger(__name__)


def build_endpoint_graph(roads: Sequence[RoadSegment],
                         threshold_m: float = DEFAULT_BRIDGE_THRESHOLD_M) -> nx.Graph:
    """
    @brief Undirected graph of directly connected roads

    @param roads Reference roads
    @param threshold_m Endpoint distance treated as a direct connection
    @return nx.Graph with one node per road id (attribute "name")
    """
    G = nx.Graph()
    for road in roads:
        G.add_node(road.id, name=road.name)

    for i, road_a in enumerate(roads):
        for road_b in roads[i + 1:]:
            if roads_are_connected(road_a, road_b, threshold_m):
                G.add_edge(road_a.id, road_b.id)

    logger.debug(f"Endpoint graph: {G.number_of_nodes()} nodes, {G.number_of_edges()} edges")
    return G


def summarize_topology(roads: Sequence[RoadSegment],
                       threshold_m: float = DEFAULT_BRIDGE_THRESHOLD_M) -> Dict[str, Any]:
    """
    @brief Connectivity summary served by /network/topology

    @return Dict with road/connection counts, component sizes (largest first),
            isolated road ids, the share of roads with at least one neighbour
            and the share of roads in the largest component
    """
    G = build_endpoint_graph(roads, threshold_m)
    components = sorted(nx.connected_components(G), key=len, reverse=True)
    isolated = sorted(nx.isolates(G))
    largest = len(components[0]) if components else 0
    n = G.number_of_nodes()

    return {
        "road_count": n,
        "connection_count": G.number_of_edges(),
        "component_count": len(components),
        "component_sizes": [len(c) for c in components],
        "isolated_roads": isolated,
        "connected_share": round((n - len(isolated)) / n, 3) if n else 0.0,
        "largest_component_share": round(largest / n, 3) if n else 0.0,
        "threshold_m": threshold_m,
    }
