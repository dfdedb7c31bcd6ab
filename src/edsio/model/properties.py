"""Closed catalogue of spectrum property identifiers.

Every identifier carries a display label, a unit string and the value kind
that ``PropertyBag`` enforces on assignment.
"""

from enum import Enum

__all__ = ["PropertyKind", "SpectrumProperty"]


class PropertyKind(str, Enum):
    """Value kind held by a property."""
    NUMBER = "number"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    COMPOSITION = "composition"
    IMAGE = "image"
    OBJECT = "object"
    BOOLEAN = "boolean"


_N = PropertyKind.NUMBER
_T = PropertyKind.TEXT
_D = PropertyKind.TIMESTAMP
_C = PropertyKind.COMPOSITION
_I = PropertyKind.IMAGE
_O = PropertyKind.OBJECT
_B = PropertyKind.BOOLEAN


class SpectrumProperty(Enum):
    """Well-known spectrum property identifiers.

    Each member value is ``(key, label, unit, kind)``; ``key`` equals the
    member name and keeps member values unique.
    """

    # =========================================================================
    # Identity and provenance
    # =========================================================================
    SpectrumDisplayName = ("SpectrumDisplayName", "Display name", "", _T)
    SpecimenName = ("SpecimenName", "Sample name", "", _T)
    SpecimenDesc = ("SpecimenDesc", "Specimen description", "", _T)
    SpectrumIndex = ("SpectrumIndex", "Spectrum index", "#", _N)
    SampleId = ("SampleId", "Sample number", "", _T)
    ClientsSampleID = ("ClientsSampleID", "Client's ID", "", _T)
    ClientName = ("ClientName", "Client name", "", _T)
    ProjectName = ("ProjectName", "Project", "", _T)
    SourceFile = ("SourceFile", "Source file", "", _T)
    SourceFileId = ("SourceFileId", "Identifier", "", _T)
    InstrumentOperator = ("InstrumentOperator", "Operator", "", _T)
    Analyst = ("Analyst", "Analyst", "", _T)
    Instrument = ("Instrument", "Instrument", "", _T)
    Software = ("Software", "Software", "", _T)
    AcquisitionTime = ("AcquisitionTime", "Acquisition time", "", _D)
    SpectrumComment = ("SpectrumComment", "Spectrum description", "", _T)
    SpectrumClass = ("SpectrumClass", "Spectrum class", "", _T)
    SpectrumType = ("SpectrumType", "Spectrum type", "", _T)
    IsTheoreticallyGenerated = ("IsTheoreticallyGenerated", "Theoretical", "", _B)
    IsStandard = ("IsStandard", "Is a standard", "", _B)
    BackgroundCorrected = ("BackgroundCorrected", "Is background corrected", "", _B)
    XUnits = ("XUnits", "X Units", "", _T)
    YUnits = ("YUnits", "Y Units", "", _T)
    XLabel = ("XLabel", "X Label", "", _T)
    YLabel = ("YLabel", "Y Label", "", _T)
    SignalType = ("SignalType", "Signal type", "", _T)
    ImageRef = ("ImageRef", "Image Reference", "", _T)

    # =========================================================================
    # Detector geometry and window
    # =========================================================================
    Azimuth = ("Azimuth", "Azimuthal angle", "°", _N)
    Elevation = ("Elevation", "Elevation", "°", _N)
    DetectorArea = ("DetectorArea", "Detector area", "mm²", _N)
    DetectorThickness = ("DetectorThickness", "Detector thickness", "mm", _N)
    DetectorTilt = ("DetectorTilt", "Detector tilt", "°", _N)
    DetectorInclination = ("DetectorInclination", "Detector inclination", "°", _N)
    TakeOffAngle = ("TakeOffAngle", "Take off angle", "°", _N)
    DetectorDistance = ("DetectorDistance", "Specimen-to-detector distance", "mm", _N)
    DetectorPosition = ("DetectorPosition", "Detector position", "mm", _O)
    SolidAngle = ("SolidAngle", "Solid angle", "sR", _N)
    WindowType = ("WindowType", "Window type", "", _T)
    DiamondWindow = ("DiamondWindow", "Diamond window thickness", "µm", _N)
    MylarWindow = ("MylarWindow", "Mylar window thickness", "µm", _N)
    BoronNitrideWindow = ("BoronNitrideWindow", "Boron nitride window thickness", "µm", _N)
    SiliconNitrideWindow = ("SiliconNitrideWindow", "Silicon nitride window thickness", "µm", _N)
    ParaleneWindow = ("ParaleneWindow", "Paralene window thickness", "µm", _N)
    PyroleneWindow = ("PyroleneWindow", "Pyrolene window thickness", "µm", _N)
    MoxtekWindow = ("MoxtekWindow", "Moxtek window thickness", "µm", _N)
    HydroCarbonWindow = ("HydroCarbonWindow", "Hydrocarbon window thickness", "µm", _N)
    BerylliumWindow = ("BerylliumWindow", "Beryllium window thickness", "µm", _N)
    AluminumWindow = ("AluminumWindow", "Aluminum window thickness", "nm", _N)
    GoldLayer = ("GoldLayer", "Gold layer thickness", "nm", _N)
    AluminumLayer = ("AluminumLayer", "Aluminum layer thickness", "nm", _N)
    IceThickness = ("IceThickness", "Ice layer thickness", "µm", _N)
    CarbonCoating = ("CarbonCoating", "Carbon layer", "nm", _N)
    DeadLayer = ("DeadLayer", "Dead layer", "µm", _N)
    ActiveLayer = ("ActiveLayer", "Active layer", "µm", _N)
    DetectorType = ("DetectorType", "Detector type", "", _T)
    DetectorDescription = ("DetectorDescription", "Detector description", "", _T)
    WindowLayers = ("WindowLayers", "Window layers", "", _O)

    # =========================================================================
    # Calibration and pulse processing
    # =========================================================================
    EnergyScale = ("EnergyScale", "Energy scale", "eV/channel", _N)
    EnergyOffset = ("EnergyOffset", "Energy offset", "eV", _N)
    Resolution = ("Resolution", "Resolution", "eV", _N)
    ResolutionLine = ("ResolutionLine", "Resolution measurement energy", "eV", _N)
    QuantumEfficiency = ("QuantumEfficiency", "Quantum efficiency", "", _N)
    PulseProcessTime = ("PulseProcessTime", "Pulse process time", "µs", _N)
    DeadPercent = ("DeadPercent", "Dead-time", "%", _N)
    SlowChannelCounts = ("SlowChannelCounts", "Slow channel counts", "cps", _N)
    MediumChannelCounts = ("MediumChannelCounts", "Medium channel counts", "cps", _N)
    FastChannelCounts = ("FastChannelCounts", "Fast channel counts", "cps", _N)
    LLD = ("LLD", "LLD", "channels", _N)

    # =========================================================================
    # Acquisition
    # =========================================================================
    LiveTime = ("LiveTime", "Live time", "s", _N)
    RealTime = ("RealTime", "Real time", "s", _N)
    IntegrationTime = ("IntegrationTime", "Integration time", "ms", _N)
    DwellTime = ("DwellTime", "Dwell time", "ms", _N)
    StagePosition = ("StagePosition", "Stage position", "", _O)
    ProbeCurrent = ("ProbeCurrent", "Probe current", "nA", _N)
    ProbeArea = ("ProbeArea", "Probe area", "nm²", _N)
    SpotSize = ("SpotSize", "Spot size", "%", _N)
    BeamEnergy = ("BeamEnergy", "Beam energy", "keV", _N)
    WorkingDistance = ("WorkingDistance", "Working distance", "mm", _N)
    EmissionCurrent = ("EmissionCurrent", "Emission current", "µA", _N)
    Magnification = ("Magnification", "Magnification", "×", _N)
    MagnificationZoom = ("MagnificationZoom", "Magnification zoom", "×", _N)
    ConvergenceAngle = ("ConvergenceAngle", "Convergence angle", "mR", _N)
    CollectionAngle = ("CollectionAngle", "Collection angle", "mR", _N)
    OperatingMode = ("OperatingMode", "Operating mode", "", _T)
    SampleOrientation = ("SampleOrientation", "Sample tilt (x, y)", "°", _O)
    BeamSpotX = ("BeamSpotX", "Beam position[X]", "", _N)
    BeamSpotY = ("BeamSpotY", "Beam position[Y]", "", _N)
    XRFSourceVoltage = ("XRFSourceVoltage", "XRF Source Voltage", "keV", _N)
    XRFTubeCurrent = ("XRFTubeCurrent", "XRF Tube Current", "µA", _N)
    XRFFilter = ("XRFFilter", "XRF Source Filter", "", _T)

    # =========================================================================
    # Specimen
    # =========================================================================
    SpecimenThickness = ("SpecimenThickness", "Specimen thickness", "nm", _N)
    SpecimenDensity = ("SpecimenDensity", "Specimen density", "g/cm³", _N)
    MassThickness = ("MassThickness", "Mass-thickness", "µg/cm²", _N)
    ConductiveCoating = ("ConductiveCoating", "Conductive coating", "", _T)
    StandardComposition = ("StandardComposition", "Standard Composition", "", _C)
    MicroanalyticalComposition = ("MicroanalyticalComposition", "Microanalytical Composition", "", _C)
    ElementList = ("ElementList", "Element List", "", _T)
    StandardizedElements = ("StandardizedElements", "Standard For", "", _T)
    MultiSpectrumMetric = ("MultiSpectrumMetric", "Multi-Spectrum Metric", "", _N)
    MicroImage = ("MicroImage", "Micro image", "", _I)

    def __init__(self, key, label, unit, kind):
        self.label = label
        self.unit = unit
        self.kind = kind

    def __repr__(self):
        return f"<SpectrumProperty.{self.name}>"

    @classmethod
    def from_name(cls, name: str) -> "SpectrumProperty":
        """Look up a member by name, raising ``KeyError`` when unknown."""
        return cls[name]
