"""Poincare sphere maps of Stokes parameter trajectories.

This package turns trajectories of Stokes triplets into a drawing of the
Poincare sphere:
- Trajectory parser: the ``p ... q`` path grammar with tick marks and labels
- Geometry kernel: two-angle Euler projection, visibility, tick-mark normals
- Scene assembler: shaded sphere, equators, hidden/visible trajectory passes,
  user arrows, and coordinate axes as an ordered stream of draw commands
- Emitters: MetaPost source, Encapsulated PostScript, and matplotlib images
"""

__all__: list[str] = []
