"""Circle Matrix: a parametric grid of discs and quads, wrapped onto a cylinder and rendered with PyVista."""
