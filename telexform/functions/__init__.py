# telexform Functions Directory
"""
This directory contains the built-in functions of the transformation language.
Functions are declared through `FunctionSpec` contracts and resolved by
`FunctionRegistry` with deterministic namespace rules.
"""
