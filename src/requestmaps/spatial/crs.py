import warnings

from pyproj import CRS

from requestmaps.exceptions import CRSMismatchError


def _crs_of(obj):
    crs = getattr(obj, "crs", None)
    return CRS.from_user_input(crs) if crs is not None else None


def check_common_crs(*frames):
    """
    Check that every GeoDataFrame/GeoSeries shares one CRS.

    Frames without a ``crs`` attribute (plain DataFrames, grids) are skipped.

    Args:
        *frames: GeoDataFrames, GeoSeries or other layer data.

    Returns:
        pyproj.CRS or None: The shared CRS, or None if no frame carries one.

    Raises:
        CRSMismatchError: If two frames disagree, or one geo frame has no CRS
            while another has one.
    """
    common = None
    missing = False
    for frame in frames:
        if not hasattr(frame, "crs"):
            continue
        crs = _crs_of(frame)
        if crs is None:
            missing = True
            continue
        if common is None:
            common = crs
        elif crs != common:
            raise CRSMismatchError(
                f"Layers use different CRS: {common.to_string()} and {crs.to_string()}. "
                "Reproject with to_common_crs() first."
            )
    if missing and common is not None:
        raise CRSMismatchError("Some layers have no CRS while others use " + common.to_string() + ".")
    return common


def to_common_crs(frames, crs):
    """
    Reproject GeoDataFrames to one CRS.

    Args:
        frames (list): GeoDataFrames or GeoSeries.
        crs (str or pyproj.CRS): Target CRS.

    Returns:
        list: New frames in the target CRS (inputs are left untouched).
    """
    target = CRS.from_user_input(crs)
    out = []
    for frame in frames:
        if frame.crs is None:
            raise CRSMismatchError("Cannot reproject a layer that has no CRS.")
        out.append(frame if CRS.from_user_input(frame.crs) == target else frame.to_crs(target))
    return out


def warn_if_geographic(crs, purpose="distances"):
    """Warn when a geographic CRS would give degree units for a metric operation."""
    if crs is not None and CRS.from_user_input(crs).is_geographic:
        warnings.warn(
            f"CRS {CRS.from_user_input(crs).to_string()} is geographic. {purpose.capitalize()} "
            "will be in degrees. Project to a metric CRS first."
        )
        return True
    return False
