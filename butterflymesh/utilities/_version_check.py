# SPDX-FileCopyrightText: Copyright (c) 2023 - 2026 NVIDIA CORPORATION & AFFILIATES.
# SPDX-FileCopyrightText: All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Guards for functions that depend on optional packages."""

import functools
import importlib.util
from importlib import metadata

from packaging.specifiers import SpecifierSet
from packaging.version import Version


def require_version_spec(package: str, spec: str = ""):
    """Decorate a function so it raises ``ImportError`` unless ``package`` is usable.

    Parameters
    ----------
    package : str
        Distribution / import name of the optional dependency.
    spec : str, optional
        Version specifier the installed distribution must satisfy, e.g.
        ``">=0.43"``. Empty means any version.

    Examples
    --------
    >>> @require_version_spec("pyvista", ">=0.40")
    ... def plot(mesh): ...
    """

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            if importlib.util.find_spec(package) is None:
                raise ImportError(
                    f"{fn.__name__}() requires the optional dependency {package!r}. "
                    f"Install it with `pip install butterflymesh[io]`."
                )
            if spec:
                installed = Version(metadata.version(package))
                if installed not in SpecifierSet(spec):
                    raise ImportError(
                        f"{fn.__name__}() requires {package}{spec}, "
                        f"but {package}=={installed} is installed."
                    )
            return fn(*args, **kwargs)

        return wrapper

    return decorator
