"""Configure stages: planning, toolchain acquisition, cleanup and emission."""
