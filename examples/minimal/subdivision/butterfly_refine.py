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

"""
Butterfly Refinement of a Closed Primitive
==========================================

Refines one of the built-in closed surfaces with the modified Butterfly scheme
and reports how the mesh grows level by level. Optionally writes the result to
disk through PyVista.

Run:

    python butterfly_refine.py

Override values from the command line:

    python butterfly_refine.py primitive=octahedron subdivision.levels=3

    python butterfly_refine.py primitive=torus primitive.kwargs.n_major=32

    python butterfly_refine.py subdivision.tension=0.0 output.path=linear.vtp

Configuration Files
-------------------
- conf/butterfly_refine.yaml  - tension, levels and output settings
- conf/primitive/*.yaml       - one file per primitive with its load() arguments
"""

import logging

import hydra
from omegaconf import DictConfig, OmegaConf

from butterflymesh import primitives
from butterflymesh.subdivision import subdivide_butterfly

logger = logging.getLogger(__name__)


def load_primitive(cfg: DictConfig):
    """Build the coarse mesh named in the config."""
    module = getattr(primitives, cfg.name, None)
    if module is None:
        raise ValueError(
            f"Unknown primitive {cfg.name=}. "
            f"Choose one of: tetrahedron, octahedron, icosahedron, torus."
        )
    kwargs = OmegaConf.to_container(cfg.kwargs, resolve=True) if "kwargs" in cfg else {}
    return module.load(**kwargs)


@hydra.main(
    version_base=None,
    config_path="./conf",
    config_name="butterfly_refine",
)
def main(cfg: DictConfig) -> None:
    logger.info("Resolved configuration:\n%s", OmegaConf.to_yaml(cfg))

    mesh = load_primitive(cfg.primitive)
    logger.info("Coarse mesh: %s", mesh)

    refined = subdivide_butterfly(
        mesh,
        w=cfg.subdivision.tension,
        levels=cfg.subdivision.levels,
    )
    logger.info("Refined mesh: %s", refined)

    report = refined.validate(check_closed=True)
    logger.info("Closed and valid: %s", report["valid"])

    if cfg.output.path:
        from butterflymesh.io import to_pyvista

        to_pyvista(refined).save(cfg.output.path)
        logger.info("Wrote %s", cfg.output.path)


if __name__ == "__main__":
    main()
