import lazy_loader

__getattr__, __dir__, __all__ = lazy_loader.attach(
    __name__,
    submod_attrs={
        "_classify": ["BSDFType", "BSDFTypeFlags", "KLEMS_LABELS", "classify"],
        "_reciprocity": [
            "ReciprocityStats",
            "check_reciprocity",
            "format_reciprocity",
            "relative_error",
        ],
        "_report": [
            "HEMISPHERE_LINES",
            "RECIPROCITY_LINES",
            "check_file",
            "header_lines",
            "report_lines",
            "run_checks",
        ],
        "_summary": ["lambertian_percentages", "peak_angle", "summarize_hemisphere"],
    },
)

del lazy_loader
