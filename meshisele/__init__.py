"""MeshiSele: decide what to eat, at home or out."""
