import copy

from ..datasets import CLUSTERING_PRESETS, PROJECTION_PRESETS

DEFAULTS = dict(
    simulation=dict(
        dataset="random", k=3, clusters=3, dimensions=10, perplexity=30,
        max_iterations=20, speed=1
    ),
    view=dict(color_mode="cluster", show_trails=False),
    system=dict(mode="kmeans", backend="auto")
)

# Values that differ per engine; merged over DEFAULTS by defaults_for().
MODE_DEFAULTS = {
    "kmeans": dict(simulation=dict(max_iterations=20)),
    "tsne": dict(simulation=dict(max_iterations=100)),
}

# Inclusive (minimum, maximum, step).
LIMITS = {
    "simulation.k": (1, 10, 1),
    "simulation.clusters": (2, 10, 1),
    "simulation.dimensions": (3, 50, 1),
    "simulation.perplexity": (5, 50, 5),
    "simulation.max_iterations": (1, 100, 1),
    "simulation.speed": (1, 10, 1),
}

COLOR_MODES = [
    ("cluster", "Par groupe"),
    ("gradient", "Dégradé de position"),
    ("distance", "Distance au centre"),
]

TOOLTIPS = {
    "simulation.dataset":"Choisit la forme du jeu de données généré.",
    "simulation.k":"Nombre de centroïdes placés au hasard au démarrage.",
    "simulation.clusters":"Nombre de groupes présents dans les données haute dimension.",
    "simulation.dimensions":"Nombre de dimensions des données d’origine.",
    "simulation.perplexity":"Écarte les groupes et augmente l’agitation des points.",
    "simulation.max_iterations":"Nombre d’itérations avant l’arrêt automatique.",
    "simulation.speed":"Nombre d’itérations calculées par seconde.",
    "view.color_mode":"Mode d’attribution des couleurs des points.",
    "view.show_trails":"Trace le chemin parcouru par les points et les centroïdes.",
    "system.mode":"Algorithme affiché dans la fenêtre de visualisation.",
}

# Datasets each engine can build; a profile naming another dataset is hidden
# from that engine's window.
MODE_DATASETS = {
    "kmeans": CLUSTERING_PRESETS,
    "tsne": PROJECTION_PRESETS,
}

PROFILE_PRESETS = {
    "Trois groupes": dict(
        simulation=dict(dataset="clusters", k=3, max_iterations=20, speed=2),
        view=dict(color_mode="cluster", show_trails=True),
    ),
    "Spirale difficile": dict(
        simulation=dict(dataset="spiral", k=4, max_iterations=30, speed=1),
        view=dict(color_mode="distance", show_trails=True),
    ),
    "Cercles concentriques": dict(
        simulation=dict(dataset="circle", k=3, max_iterations=20, speed=3),
        view=dict(color_mode="gradient", show_trails=False),
    ),
    "Chiffres manuscrits": dict(
        simulation=dict(dataset="mnist", clusters=10, dimensions=20, perplexity=30, max_iterations=100, speed=3),
        view=dict(color_mode="cluster", show_trails=False),
    ),
    "Groupes imbriqués": dict(
        simulation=dict(dataset="hierarchical", clusters=4, perplexity=20, max_iterations=80, speed=2),
        view=dict(color_mode="distance", show_trails=True),
    ),
}


def defaults_for(mode: str) -> dict:
    """DEFAULTS with the overrides of ``mode`` applied."""

    out = copy.deepcopy(DEFAULTS)
    for section, values in MODE_DEFAULTS.get(mode, {}).items():
        out.setdefault(section, {}).update(values)
    out["system"]["mode"] = mode if mode in MODE_DEFAULTS else DEFAULTS["system"]["mode"]
    return out
