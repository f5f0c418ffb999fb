"""
Layered atmosphere.

RefractiveLayer
    A horizontal boundary and the refractive index above it
LayeredMedium
    Ordered stack of layers with index lookup by height
"""

from flatrefract.atmosphere.layers import LayeredMedium, RefractiveLayer

__all__ = ["LayeredMedium", "RefractiveLayer"]
