"""Pydantic models for the Instance Matching Engine.

Input schemas for compute requirements, raw catalog/pricing records as
returned by the EC2 and Pricing APIs, and output schemas for matches.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================


class Architecture(str, Enum):
    """Processor architecture."""
    X86_64 = "x86_64"
    ARM64 = "arm64"


class StorageType(str, Enum):
    """Root/data storage preference."""
    EBS = "ebs"  # EBS only, no local instance store
    INSTANCE = "instance"  # Local NVMe/SSD instance store required
    ANY = "any"


class WorkloadCategory(str, Enum):
    """Research workload category."""
    GENOMICS = "genomics"
    CLIMATE = "climate"
    ML = "ml"
    PHYSICS = "physics"
    CHEMISTRY = "chemistry"
    ENGINEERING = "engineering"


class RuntimeUnit(str, Enum):
    """Unit for workload runtime estimates."""
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"


# =============================================================================
# Requirements
# =============================================================================


class ComputeRequirements(BaseModel):
    """Resource requirements for a compute workload.

    All fields are optional. Min/max consistency is not enforced here;
    callers are expected to supply sane ranges.
    """
    min_vcpus: Optional[int] = Field(None, description="Minimum vCPU count")
    max_vcpus: Optional[int] = Field(None, description="Maximum vCPU count")
    min_memory_gib: Optional[float] = Field(None, description="Minimum memory in GiB")
    max_memory_gib: Optional[float] = Field(None, description="Maximum memory in GiB")
    require_gpu: bool = Field(False, description="Instance must have a GPU")
    min_gpu_memory_gib: Optional[int] = Field(
        None,
        description="Minimum total GPU memory in GiB (only meaningful with require_gpu)"
    )
    architecture: Optional[Architecture] = Field(None, description="Required processor architecture")
    network_performance: list[str] = Field(
        default_factory=list,
        description="Preferred network performance labels, e.g. 'Up to 10 Gigabit'"
    )
    storage_type: Optional[StorageType] = Field(None, description="Storage preference")


# =============================================================================
# Raw Catalog Models (matching EC2 DescribeInstanceTypes format)
# =============================================================================


class ProcessorDetails(BaseModel):
    """Raw processor info."""
    SupportedArchitectures: list[str] = Field(default_factory=list)
    SustainedClockSpeedInGhz: Optional[float] = None
    Manufacturer: Optional[str] = None

    class Config:
        extra = "allow"


class VCpuDetails(BaseModel):
    """Raw vCPU info."""
    DefaultVCpus: int = Field(..., ge=1)
    DefaultCores: Optional[int] = None
    DefaultThreadsPerCore: Optional[int] = None
    ValidCores: list[int] = Field(default_factory=list)
    ValidThreadsPerCore: list[int] = Field(default_factory=list)

    class Config:
        extra = "allow"


class MemoryDetails(BaseModel):
    """Raw memory info."""
    SizeInMiB: int = Field(..., gt=0)

    class Config:
        extra = "allow"


class NetworkDetails(BaseModel):
    """Raw network info."""
    NetworkPerformance: str = ""
    MaximumNetworkInterfaces: Optional[int] = None
    Ipv4AddressesPerInterface: Optional[int] = None
    Ipv6AddressesPerInterface: Optional[int] = None
    Ipv6Supported: Optional[bool] = None

    class Config:
        extra = "allow"


class DiskInfo(BaseModel):
    """Raw local disk info."""
    SizeInGB: int
    Count: int
    Type: str

    class Config:
        extra = "allow"


class InstanceStorageDetails(BaseModel):
    """Raw instance store info."""
    TotalSizeInGB: int = 0
    Disks: list[DiskInfo] = Field(default_factory=list)
    NvmeSupport: Optional[str] = None

    class Config:
        extra = "allow"


class GpuMemoryDetails(BaseModel):
    """Raw per-device GPU memory info."""
    SizeInMiB: int

    class Config:
        extra = "allow"


class GpuDevice(BaseModel):
    """Raw GPU device entry."""
    Name: str
    Manufacturer: Optional[str] = None
    Count: int = 1
    MemoryInfo: Optional[GpuMemoryDetails] = None

    class Config:
        extra = "allow"


class GpuDetails(BaseModel):
    """Raw GPU info for an instance type."""
    Gpus: list[GpuDevice] = Field(default_factory=list)
    TotalGpuMemoryInMiB: int = 0

    class Config:
        extra = "allow"


class InstanceType(BaseModel):
    """Raw instance type record from the catalog.

    Field names follow the EC2 API so DescribeInstanceTypes responses
    validate without translation.
    """
    InstanceType: str
    CurrentGeneration: bool = False
    ProcessorInfo: ProcessorDetails = Field(default_factory=ProcessorDetails)
    VCpuInfo: VCpuDetails
    MemoryInfo: MemoryDetails
    NetworkInfo: NetworkDetails = Field(default_factory=NetworkDetails)
    InstanceStorageInfo: Optional[InstanceStorageDetails] = None
    GpuInfo: Optional[GpuDetails] = None

    class Config:
        extra = "allow"

    @property
    def vcpus(self) -> int:
        return self.VCpuInfo.DefaultVCpus

    @property
    def memory_gib(self) -> float:
        return self.MemoryInfo.SizeInMiB / 1024

    @property
    def gpu_memory_gib(self) -> float:
        if not self.GpuInfo:
            return 0.0
        return self.GpuInfo.TotalGpuMemoryInMiB / 1024

    @property
    def gpu_name(self) -> Optional[str]:
        if not self.GpuInfo or not self.GpuInfo.Gpus:
            return None
        return self.GpuInfo.Gpus[0].Name

    @property
    def network_performance(self) -> str:
        return self.NetworkInfo.NetworkPerformance

    @property
    def architectures(self) -> list[str]:
        return self.ProcessorInfo.SupportedArchitectures

    @property
    def has_instance_storage(self) -> bool:
        return bool(self.InstanceStorageInfo and self.InstanceStorageInfo.TotalSizeInGB > 0)


class SpotPriceQuote(BaseModel):
    """Raw spot price history row (EC2 DescribeSpotPriceHistory format)."""
    InstanceType: str
    SpotPrice: str
    AvailabilityZone: Optional[str] = None
    ProductDescription: Optional[str] = None
    Timestamp: Optional[str] = None

    class Config:
        extra = "allow"


# =============================================================================
# Pricing and Match Output Models
# =============================================================================


class PricingInfo(BaseModel):
    """Hourly USD rates for one instance type.

    Zero means the rate is unknown, not free.
    """
    on_demand: float = Field(0.0, ge=0)
    reserved_1yr: float = Field(0.0, ge=0)
    reserved_3yr: float = Field(0.0, ge=0)
    spot_current: float = Field(0.0, ge=0)

    @property
    def has_on_demand(self) -> bool:
        return self.on_demand > 0


class MatchPricing(PricingInfo):
    """Pricing snapshot attached to a match."""
    spot_average_24h: float = Field(
        0.0,
        ge=0,
        description="Currently mirrors spot_current; no averaging is performed"
    )


class WeightFactors(BaseModel):
    """Blend weights for the three scoring axes.

    Weights are applied as given and are not required to sum to 1.
    """
    performance: float = Field(0.4, description="Weight for raw performance fit")
    cost: float = Field(0.4, description="Weight for cost efficiency")
    efficiency: float = Field(0.2, description="Weight for resource-utilization efficiency")


class ScoreBreakdown(BaseModel):
    """Per-axis scores behind a match score."""
    performance: int = Field(..., ge=0, le=100)
    cost: int = Field(..., ge=0, le=100)
    efficiency: int = Field(..., ge=0, le=100)
    weights: WeightFactors


class InstanceMatch(BaseModel):
    """A scored candidate instance type."""
    instance: InstanceType
    pricing: MatchPricing
    match_score: int = Field(..., ge=0, le=100)
    match_reasons: list[str] = Field(
        default_factory=list,
        description="Reasons in the order the scoring rules fired"
    )
    breakdown: ScoreBreakdown

    @property
    def instance_type(self) -> str:
        return self.instance.InstanceType


class MatchingOptions(BaseModel):
    """Options for a match call."""
    max_results: int = Field(10, ge=1)
    include_spot_pricing: bool = True
    weight_factors: WeightFactors = Field(default_factory=WeightFactors)


# =============================================================================
# Workload Presets
# =============================================================================


class RuntimeEstimate(BaseModel):
    """Expected runtime range for a workload."""
    min: float = Field(..., gt=0)
    max: float = Field(..., gt=0)
    unit: RuntimeUnit


class ResearchWorkload(BaseModel):
    """A preset research workload with embedded requirements."""
    id: str
    name: str
    description: str
    category: WorkloadCategory
    requirements: ComputeRequirements
    estimated_runtime: Optional[RuntimeEstimate] = None
