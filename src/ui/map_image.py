import matplotlib.pyplot as plt
import networkx as nx


def save_map_image(town, file_path: str, title: str = "Town Map"):
    """
    Generates and saves a picture of the town to a file.

    Vertices are drawn at their positions (a spring layout is used when some
    are missing), roads are labelled with their weight and the number of cars
    assigned to them, and closed roads are dashed.

    Args:
        town (Town): The town to draw.
        file_path (str): Where to save the PNG.
        title (str): The figure title.
    """
    graph = town.graph
    pos = {
        vertex.name: vertex.position
        for vertex in town.vertices()
        if vertex.position is not None
    }
    if len(pos) != graph.number_of_nodes():
        pos = nx.spring_layout(graph, pos=pos or None, fixed=list(pos) or None, seed=0)

    open_roads = [edge.id for edge in town.edges() if not edge.closed]
    closed_roads = [edge.id for edge in town.edges() if edge.closed]
    labels = {
        edge.id: ("closed" if edge.closed else f"{edge.weight:g}") + (f" ({len(edge.cars)})" if edge.cars else "")
        for edge in town.edges()
    }

    fig = plt.figure(figsize=(10, 8))

    nx.draw_networkx_nodes(graph, pos, node_size=700, node_color='skyblue')
    nx.draw_networkx_labels(graph, pos, font_size=10, font_weight='bold')
    if open_roads:
        nx.draw_networkx_edges(graph, pos, edgelist=open_roads, arrowsize=20, connectionstyle="arc3,rad=0.1")
    if closed_roads:
        nx.draw_networkx_edges(graph, pos, edgelist=closed_roads, arrowsize=20, style="dashed",
                               edge_color="red", connectionstyle="arc3,rad=0.1")
    if labels:
        nx.draw_networkx_edge_labels(graph, pos, edge_labels=labels, font_size=8, label_pos=0.3)

    plt.title(title)
    plt.axis('equal')
    plt.savefig(file_path)
    plt.close(fig)
