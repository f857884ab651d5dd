"""
Conversion and validation core: geometry model, codecs, union and validator.
"""
