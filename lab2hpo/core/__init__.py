"""
lab2hpo core: LOINC types, code normalization, annotation table,
HPO assertions and inference, observation analysis.
"""
