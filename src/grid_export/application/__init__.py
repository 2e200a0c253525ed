"""Application layer – grid contracts, export pipeline and the export menu widget."""
