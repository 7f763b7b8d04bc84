from .document_surface import DocumentSurface

__all__ = ['DocumentSurface']
