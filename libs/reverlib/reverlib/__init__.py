"""reverlib -- compiler for the ReverHTTP route description language.

Source text is tokenized and parsed into an AST (:mod:`reverlib.parser`),
lowered to an intermediate representation (:mod:`reverlib.gen`,
:mod:`reverlib.ir`) and serialized as JSON or YAML for downstream code
generators.
"""

__version__ = "0.1.0"
