"""Synthetic vendor files for decoder, sniffer and registry tests.

Every builder returns the complete file as ``bytes``. Field values are
chosen to be exact in float32 so golden assertions can use ``==`` where
the decoder does no arithmetic.
"""

import numpy as np

from edsio.binary import ByteOrder, EndianWriter
from edsio.formats.tiff import TiffDirectory, TiffField, TiffType, encode_tiff


# =============================================================================
# Big-endian multi-record (DTSA)
# =============================================================================

def dtsa_bytes(records=((1.0, 2.0, 3.0, 4.0),), n_channels=8, energy_scale=10.0, elevation=40.0,
               azimuth=0.0, live_time=50.0, truncate_last=0):
    """DTSA file with one record per entry of ``records`` (channel values)."""
    w = EndianWriter(ByteOrder.BIG)
    w.write_int16(len(records))  # last
    w.write_int16(1)  # first
    w.write_pascal("Copper", 50)
    w.write_pascal("cu.dtsa", 25)
    w.write_pascal("Pure copper standard", 255)
    w.write_pascal("", 25)
    w.write_int16(0)
    w.write_pascal("N. Ritchie", 50)
    w.pad(4)
    w.write_float32(azimuth)
    w.write_float32(elevation)
    # area, thickness, carbon, diamond, mylar, BN, SiN, ice, gold (µm), aluminum, beryllium
    for value in (10.0, 3.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.5, 0.0, 8.0):
        w.write_float32(value)
    for value in (0.0, 0.0, 0.0, 0.0):  # silicon, moxtek, paralene, wds resolution
        w.write_float32(value)
    w.write_float32(energy_scale)
    w.write_float32(130.0)  # resolution
    w.write_float32(0.0)  # offset
    w.write_float32(0.0)
    w.write_int16(n_channels)
    w.write_float32(20.0)  # beam energy
    w.write_float32(0.0)  # tilt
    w.write_float32(0.0)  # quantum efficiency
    w.pad(14)

    for values in records:
        w.write_pascal("SPEC", 4)
        w.write_pascal("Record", 255)
        w.write_int16(1)
        w.write_pascal("Measured", 25)
        w.write_uint8(0)
        w.write_uint8(1)  # standard
        w.write_uint8(0)
        w.pad(1)
        w.pad(8)
        for value in (0.0, 0.0, 40.0, 0.0, 0.0, 0.0, 0.0):
            w.write_float32(value)
        w.write_int16(1)
        for i in range(15):
            w.write_int16(29 if i == 0 else 0)
            w.write_float32(0.0)
            w.write_float32(1.0 if i == 0 else 0.0)
            w.pad(8)
        w.pad(4 * 157 + 2 + 8 + 4)
        w.write_float32(0.0)  # beam spot area
        w.write_float32(1.5)  # stage x
        w.write_float32(-2.5)  # stage y
        w.write_float32(0.0)
        w.write_int16(1)
        w.write_int16(len(values))
        w.write_float32(1.0)  # beam current
        w.pad(14)
        w.write_float32(live_time + 10.0)  # real time
        w.write_float32(live_time)
        for _ in range(3):
            w.write_int32(0)
        w.pad(10)
        w.write_int16(5)  # LLD
        w.pad(6)
        w.write_array("float32", values)
    data = w.getvalue()
    return data[:len(data) - truncate_last] if truncate_last else data


# =============================================================================
# Text tag (EMSA)
# =============================================================================

EMSA_TEXT = "\r\n".join([
    "#FORMAT      : EMSA/MAS Spectral Data File",
    "#VERSION     : 1.0",
    "#TITLE       : Test spectrum",
    "#DATE        : 14-MAR-2023",
    "#TIME        : 14:05",
    "#OWNER       : Analyst",
    "#NPOINTS     : 4",
    "#NCOLUMNS    : 1",
    "#XUNITS      : keV",
    "#YUNITS      : counts",
    "#DATATYPE    : Y",
    "#XPERCHAN    : 0.01",
    "#OFFSET      : -0.1",
    "#BEAMKV   -kV: 20.0",
    "#LIVETIME  -s: 60.5",
    "#REALTIME  -s: 62.0",
    "#ELEVANGLE-dg: 35.0",
    "#TBEWIND  -cm: 8.0E-4",
    "#XPOSITION mm: 1.25",
    "#EDSDET      : SDBEW",
    "##D2STDCMP   : Brass,(Cu:70.0000),(Zn:30.0000),8.53",
    "#SPECTRUM    : Spectral Data Starts Here",
    "1.0, 2.0,",
    "3.0, 4.0,",
    "#ENDOFDATA   :",
    "",
])


def emsa_bytes_sample(text=EMSA_TEXT):
    return text.encode("ascii")


# =============================================================================
# Tag-structured image container (ASPEX TIFF)
# =============================================================================

ASPEX_DESCRIPTION = "\n".join([
    "live_time=00:01:00",
    "acquisition_time=65.5",
    "probe_current=1.25",
    "accelerating_voltage=20",
    "take_off_angle=57",
    "element_percent=Fe,50",
    "element_percent=Ni,50",
    "stage_x=12.5",
    "stage_y=-3.25",
    "analysis_date=03/14/23",
    "analysis_time=2:05:09 PM",
    "comment=Particle 7",
    "part#=7",
    "user_masthead=Lab",
])


def aspex_bytes(counts=(5, 10, 15, 20), description=ASPEX_DESCRIPTION, xres="5.0", xoff="-10.0"):
    ifd = TiffDirectory()
    ifd.add(TiffField.numbers(0x8352, TiffType.SLONG, counts))
    ifd.add(TiffField.ascii(0x8353, xres))
    ifd.add(TiffField.ascii(0x8354, xoff))
    ifd.add(TiffField.ascii(270, description))
    ifd.add(TiffField.ascii(305, "ASPEX PSEM"))
    return encode_tiff([ifd])


# =============================================================================
# Fixed-layout little-endian binaries
# =============================================================================

def emispec_bytes(elements=((1.0, 2.0, 3.0), (10.0, 20.0, 30.0)), valid=None, zero=-100.0, width=20.0,
                  type_code=7, data_type=0x4120, description="Spectrum position"):
    """TIA series with one 1-D element per entry of ``elements``."""
    total = len(elements)
    valid = total if valid is None else valid
    desc = description.encode("latin-1")
    units = b"m"
    dimension = 4 + 8 + 8 + 4 + 4 + len(desc) + 4 + len(units)
    arrays_at = 30 + dimension
    kind = {2: "uint16", 5: "int16", 6: "int32", 7: "float32", 8: "float64"}[type_code]
    itemsize = np.dtype(kind).itemsize
    offsets = []
    pos = arrays_at + 8 * total
    for values in elements:
        offsets.append(pos)
        pos += 26 + itemsize * len(values)

    w = EndianWriter(ByteOrder.LITTLE)
    w.write_uint16(0x4949)
    w.write_uint16(0x0197)
    w.write_uint16(0x0210)
    w.write_int32(data_type)
    w.write_int32(0x4152)
    w.write_int32(total)
    w.write_int32(valid)
    w.write_int32(arrays_at)
    w.write_int32(1)
    w.write_int32(total)
    w.write_float64(0.0)
    w.write_float64(1.0)
    w.write_int32(0)
    w.write_int32(len(desc))
    w.write_bytes(desc)
    w.write_int32(len(units))
    w.write_bytes(units)
    w.write_array("int32", offsets)
    w.write_array("int32", [0] * total)
    for values in elements:
        w.write_float64(zero)
        w.write_float64(width)
        w.write_int32(0)
        w.write_int16(type_code)
        w.write_int32(len(values))
        w.write_array(kind, values)
    return w.getvalue()


EDAX_TAIL_OFFSET = 3840 + 4 * 4096


def edax_bytes(counts=(1, 2, 3, 4), with_tail=True, tail_length=516, live_time=50.0, beam_energy=20.0):
    n = len(counts)
    size = EDAX_TAIL_OFFSET + tail_length if with_tail else 3840 + 4 * n
    w = EndianWriter(ByteOrder.LITTLE)
    w.pad(size)

    w.seek(0)
    w.write_float32(0.75)  # version
    w.write_float32(3.5)
    w.write_chars("sample", 8)
    w.write_int16(2021)
    for value in (15, 3, 30, 14, 0, 45):  # day, month, minute, hour, hundredths, second
        w.write_uint8(value)
    w.write_int32(size)
    w.write_int32(3840)
    w.write_int16(n)

    w.seek(64)
    w.write_chars("Steel sample", 40)
    w.write_chars("A comment", 216)
    w.pad(8)
    w.write_int16(100)
    w.write_int16(200)

    w.seek(442)
    w.write_int16(0)
    w.write_int32(0)
    w.write_float32(0.5)  # start keV
    w.write_float32(0.5 + 0.015625 * n)  # end keV: 15.625 eV/channel
    w.write_float32(live_time)
    w.write_float32(10.0)  # tilt
    w.write_float32(35.0)  # take-off
    w.write_float32(2.5)  # beam current
    w.write_float32(128.0)  # resolution
    w.write_int32(2)  # detector code -> UTW
    for value in (0.5, 0.25, 0.0, 0.0, 0.125, 0.25):
        w.write_float32(value)
    w.write_float32(0.0)  # inclination
    w.write_float32(45.0)  # azimuth
    w.write_float32(35.0)  # elevation

    w.seek(532)
    w.write_float32(beam_energy)
    w.seek(576)
    w.write_int16(0)
    w.seek(638)
    w.write_int16(2)
    w.write_array("int16", [28, 26] + [0] * 46)

    w.seek(3096)
    w.write_int16(2)
    w.write_array("int16", [26, 28] + [0] * 22)
    w.write_array("float32", [60.0, 40.0] + [0.0] * 22)

    w.seek(3840)
    w.write_array("int32", counts)
    if with_tail and tail_length >= 516:
        w.seek(EDAX_TAIL_OFFSET)
        w.write_chars("C:\\data\\run42.spc", 256)
        w.write_chars("", 256)
        w.write_float32(12.5)
    return w.getvalue()[:size]


def radiant_bytes(description="Test", live_time=100.0, process_time=4.0, counts=None):
    counts = np.arange(2048, dtype=np.float32) if counts is None else counts
    desc = description.encode("latin-1")
    w = EndianWriter(ByteOrder.LITTLE)
    w.write_uint8(len(desc))
    w.write_bytes(desc)
    w.pad(18)
    w.write_float32(live_time)
    w.pad(4)
    w.write_float32(process_time)
    w.pad(34 - 30)
    w.write_array("float32", counts)
    return w.getvalue()


def pdz_bytes(counts=(0, 5, 10, 5), utc_offset=2, real_time=30.0, live_time=28.0):
    n = len(counts)
    w = EndianWriter(ByteOrder.LITTLE)
    w.pad(358)
    w.seek(0)
    w.write_bytes(b"\x01\x01\x17\x00")
    w.seek(6)
    w.write_int16(n)
    w.seek(50)
    w.write_float64(20.0)
    w.seek(114)
    for z, thickness in ((13, 25), (22, 100), (0, 0), (0, 0)):
        w.write_int16(z)
        w.write_int16(thickness)
    w.seek(146)
    for value in (2022, 6, utc_offset, 1, 12, 0, 5):
        w.write_int16(value)
    w.seek(162)
    w.write_float32(40.0)
    w.write_float32(15.0)
    w.seek(342)
    w.write_float32(real_time)
    w.write_float32(1.0)
    w.write_float32(0.0)
    w.write_float32(live_time)
    w.seek(358)
    w.write_array("int32", counts)
    return w.getvalue()


# =============================================================================
# Line-oriented text exports
# =============================================================================

IXRF_TEXT = "\n".join([
    "Iridium Ultra v1.0",
    "Spectrum 1",
    "eV per Channel,10",
    "CalZero,-20",
    "ElevationAngle,35",
    "ActiveArea,30",
    "SiThick,0.5",
    "Number of Channels,4",
    "7",
    "8",
    "9",
    "10",
    "",
])

PMCA_TEXT = "\r\n".join([
    "<<PMCA SPECTRUM>>",
    "TAG - live_data",
    "DESCRIPTION - Amptek X-123",
    "GAIN - 2",
    "LIVE_TIME - 99.5",
    "REAL_TIME - 100.25",
    "SERIAL_NUMBER - 1234",
    "<<DATA>>",
    "1",
    "2",
    "bogus",
    "4",
    "<<END>>",
    "",
])

SPX_TEXT = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<TRTSpectrum>
<ClassInstance Type="TRTSpectrum" Name="Spectrum 1">
<TRTHeaderedClass>
<ClassInstance Type="TRTSpectrumHardwareHeader">
<RealTime>10500</RealTime>
<LifeTime>10000</LifeTime>
<DeadTime>5</DeadTime>
<ShapingTime>130000</ShapingTime>
</ClassInstance>
<ClassInstance Type="TRTDetectorHeader">
<Type>XFlash 6|30</Type>
<DetectorThickness>0.45</DetectorThickness>
<SiDeadLayerThickness>0.029</SiDeadLayerThickness>
<WindowType>slew AP3.3</WindowType>
<WindowLayers>
<Layer0 Atom="5" Thickness="0.045"/>
<Layer1 Atom="13" Thickness="0.03"/>
</WindowLayers>
</ClassInstance>
<ClassInstance Type="TRTESMAHeader">
<PrimaryEnergy>20</PrimaryEnergy>
<ElevationAngle>35</ElevationAngle>
</ClassInstance>
</TRTHeaderedClass>
<ClassInstance Type="TRTSpectrumHeader">
<Date>14.3.2023</Date>
<Time>14:05:09</Time>
<ChannelCount>4</ChannelCount>
<CalibAbs>-0.475</CalibAbs>
<CalibLin>0.01</CalibLin>
</ClassInstance>
<ChildClassInstances>
<ClassInstance Type="TRTChartConfigurationData">
<TRTChartConfigurationData>
<SeriesProperties>
<ClassInstance Type="TRTSeriesProperties">
<Name>Point 3</Name>
</ClassInstance>
</SeriesProperties>
</TRTChartConfigurationData>
</ClassInstance>
</ChildClassInstances>
<Channels>0,3,6,9</Channels>
</ClassInstance>
</TRTSpectrum>
"""

BRUKER_TXT = "\r\n".join([
    "Bruker Nano GmbH Berlin, Germany",
    "Esprit 1.9",
    "",
    "Date: 14.3.2023",
    "Real time: 10500",
    "Life time: 10000",
    "Pulse density: 1200",
    "Primary energy: 20",
    "Take off angle: 35",
    "Tilt angle: 0",
    "Azimut angle: 45",
    "Detector type: XFlash 6|30",
    "Window type: slew AP3.3",
    "Detector thickness: 0.45",
    "Si dead layer: 0.029",
    "Calibration, lin.: 10.0",
    "Calibration, abs.: -475.0",
    "Mn FWHM: 123.5",
    "Fano factor: 0.116",
    "Channels: 4",
    "Energy Counts",
    "-475.0 2",
    "-465.0 4",
    "-455.0 6",
    "-445.0 8",
    "",
])

OXFORD_TEXT = "\r\n".join([
    "Acquired: 3/14/2023 2:05:09 PM",
    "Collimator: 3 mm",
    "Time: 30",
    "Dead Time: 12.5 %",
    "BinsToProcess: 4",
    "Tube Voltage: 40",
    "Tube Current: 50",
    "Secondary Filter: Al 50um",
    "",
    "Raw\tCorrected",
    "10\t11",
    "20\t21",
    "30\t31",
    "40\t41",
    "",
])


def ixrf_bytes(text=IXRF_TEXT):
    return text.encode("ascii")


def pmca_bytes(text=PMCA_TEXT):
    return text.encode("ascii")


def spx_bytes(text=SPX_TEXT):
    return text.encode("utf-8")


def bruker_txt_bytes(text=BRUKER_TXT):
    return text.encode("latin-1")


def oxford_bytes(text=OXFORD_TEXT):
    return b"\xef\xbb\xbf" + text.encode("utf-8")


# =============================================================================
# Corpus
# =============================================================================

def sample_corpus():
    """One synthetic file per registered format, keyed by format name."""
    return {
        "DTSA": dtsa_bytes(),
        "EMSA": emsa_bytes_sample(),
        "EMISPEC": emispec_bytes(),
        "ASPEX TIFF": aspex_bytes(),
        "IXRF": ixrf_bytes(),
        "PMCA": pmca_bytes(),
        "Radiant SPD": radiant_bytes(),
        "EDAX SPC": edax_bytes(),
        "Bruker SPX": spx_bytes(),
        "Bruker TXT": bruker_txt_bytes(),
        "Bruker PDZ": pdz_bytes(),
        "Oxford SPT": oxford_bytes(),
    }


# =============================================================================
# Ripple cube
# =============================================================================

RPL_4x3x2 = "\n".join([
    "key\tvalue",
    "width\t4",
    "height\t3",
    "depth\t2",
    "offset\t0",
    "data-length\t2",
    "data-type\tunsigned",
    "byte-order\tlittle-endian",
    "record-by\tvector",
    "ev-per-chan\t10",
    "",
])


def write_cube_pair(directory, name="cube", header=RPL_4x3x2, raw=None):
    """Write ``name.rpl`` and ``name.raw``; the default raw holds uint16 0..23."""
    rpl = directory / f"{name}.rpl"
    rpl.write_text(header)
    if raw is None:
        raw = np.arange(24, dtype="<u2").tobytes()
    (directory / f"{name}.raw").write_bytes(raw)
    return rpl
