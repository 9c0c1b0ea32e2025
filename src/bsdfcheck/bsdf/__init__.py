import lazy_loader

__getattr__, __dir__, __all__ = lazy_loader.attach(
    __name__,
    submod_attrs={
        "_core": [
            "ColorValue",
            "Component",
            "ComponentKind",
            "DISTRIBUTION_PRIORITY",
            "Hemisphere",
            "LoadedBSDF",
            "Side",
            "SpectralDistribution",
        ],
        "_evaluate": ["evaluate"],
        "_loader": ["load", "load_into", "open_bsdf"],
        "_matrix": [
            "AngleBasis",
            "GridMatrix",
            "KLEMS_FULL",
            "KLEMS_HALF",
            "KLEMS_QUARTER",
            "get_standard_basis",
        ],
        "_tree": ["TensorTree", "TreeNode", "parse_tree"],
    },
)

del lazy_loader
