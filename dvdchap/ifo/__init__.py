"""DVD-Video IFO parsing (VIDEO_TS.IFO and VTS_xx_0.IFO)."""

from dvdchap.ifo.disc import Disc, open_disc, open_title_set
from dvdchap.ifo.vmg import parse_vmg
from dvdchap.ifo.vts import parse_vts
