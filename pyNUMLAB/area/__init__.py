from ._area import AreaResult, AreaSegment, AreaSolver, area_between
from ._roots import find_roots, refine_root
