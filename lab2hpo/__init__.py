"""
lab2hpo

Translates coded laboratory results (LOINC) into Human Phenotype Ontology
term assertions and derives further assertions with AND/OR rules.
"""
__version__ = "0.1.0"
