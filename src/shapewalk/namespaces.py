from rdflib import URIRef
from rdflib.namespace import OWL, RDF, SH

# Partitions of the per-request dataset. Imported documents land in the
# partition of the document that imported them.
SHAPES_GRAPH = URIRef("urn:shapewalk:shapes")
DATA_GRAPH = URIRef("urn:shapewalk:data")

__all__ = ["OWL", "RDF", "SH", "SHAPES_GRAPH", "DATA_GRAPH"]
