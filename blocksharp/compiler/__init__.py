"""Public compiler entry points.

Expression and statement translation live in their own modules; use
:class:`blocksharp.compiler.core.CSharpGenerator` as the stable API.
"""

from blocksharp.compiler.core import CSharpGenerator, generate_csharp
from blocksharp.compiler.helpers import find_scope_violations

__all__ = ["CSharpGenerator", "find_scope_violations", "generate_csharp"]
