"""Pipeline building blocks: problem model, layouts, packer, config.

  problem       Input problem dataclasses, parsing, validation, serialization.
  layout        Placement / OutputLayout, overlap geometry, serialization.
  packer        Geometric packer used by every packing phase.
  basic_layout  Quick one-pass pack for previewing a problem.
  config        Shared layout rules (thresholds, gaps, iteration caps).
  visualize     Graphics projection of a problem + layout.
"""
