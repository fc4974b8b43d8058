"""Bundled sample catalog and hourly rates (us-east-1, Linux, shared tenancy).

Used for offline runs and tests. Records follow the EC2
DescribeInstanceTypes response shape.
"""


def _ebs_only() -> dict:
    return {"TotalSizeInGB": 0, "Disks": [], "NvmeSupport": "required"}


def _network(performance: str, interfaces: int, addresses: int) -> dict:
    return {
        "NetworkPerformance": performance,
        "MaximumNetworkInterfaces": interfaces,
        "Ipv4AddressesPerInterface": addresses,
        "Ipv6AddressesPerInterface": addresses,
        "Ipv6Supported": True,
    }


SAMPLE_INSTANCE_TYPES: list[dict] = [
    {
        "InstanceType": "m5.large",
        "CurrentGeneration": True,
        "ProcessorInfo": {"SupportedArchitectures": ["x86_64"], "SustainedClockSpeedInGhz": 3.1},
        "VCpuInfo": {
            "DefaultVCpus": 2,
            "DefaultCores": 1,
            "DefaultThreadsPerCore": 2,
            "ValidCores": [1],
            "ValidThreadsPerCore": [1, 2],
        },
        "MemoryInfo": {"SizeInMiB": 8192},
        "NetworkInfo": _network("Up to 10 Gigabit", 3, 10),
        "InstanceStorageInfo": _ebs_only(),
    },
    {
        "InstanceType": "c5.xlarge",
        "CurrentGeneration": True,
        "ProcessorInfo": {"SupportedArchitectures": ["x86_64"], "SustainedClockSpeedInGhz": 3.4},
        "VCpuInfo": {
            "DefaultVCpus": 4,
            "DefaultCores": 2,
            "DefaultThreadsPerCore": 2,
            "ValidCores": [1, 2],
            "ValidThreadsPerCore": [1, 2],
        },
        "MemoryInfo": {"SizeInMiB": 8192},
        "NetworkInfo": _network("Up to 10 Gigabit", 4, 15),
        "InstanceStorageInfo": _ebs_only(),
    },
    {
        "InstanceType": "r5.2xlarge",
        "CurrentGeneration": True,
        "ProcessorInfo": {"SupportedArchitectures": ["x86_64"], "SustainedClockSpeedInGhz": 3.1},
        "VCpuInfo": {
            "DefaultVCpus": 8,
            "DefaultCores": 4,
            "DefaultThreadsPerCore": 2,
            "ValidCores": [1, 2, 3, 4],
            "ValidThreadsPerCore": [1, 2],
        },
        "MemoryInfo": {"SizeInMiB": 65536},
        "NetworkInfo": _network("Up to 10 Gigabit", 4, 15),
        "InstanceStorageInfo": _ebs_only(),
    },
    {
        "InstanceType": "p3.2xlarge",
        "CurrentGeneration": True,
        "ProcessorInfo": {"SupportedArchitectures": ["x86_64"], "SustainedClockSpeedInGhz": 2.7},
        "VCpuInfo": {
            "DefaultVCpus": 8,
            "DefaultCores": 4,
            "DefaultThreadsPerCore": 2,
            "ValidCores": [1, 2, 3, 4],
            "ValidThreadsPerCore": [1, 2],
        },
        "MemoryInfo": {"SizeInMiB": 62464},
        "NetworkInfo": _network("Up to 10 Gigabit", 4, 15),
        "InstanceStorageInfo": _ebs_only(),
        "GpuInfo": {
            "Gpus": [
                {
                    "Name": "V100",
                    "Manufacturer": "NVIDIA",
                    "Count": 1,
                    "MemoryInfo": {"SizeInMiB": 16384},
                },
            ],
            "TotalGpuMemoryInMiB": 16384,
        },
    },
    {
        "InstanceType": "m6i.32xlarge",
        "CurrentGeneration": True,
        "ProcessorInfo": {"SupportedArchitectures": ["x86_64"], "SustainedClockSpeedInGhz": 3.5},
        "VCpuInfo": {
            "DefaultVCpus": 128,
            "DefaultCores": 64,
            "DefaultThreadsPerCore": 2,
            "ValidCores": list(range(1, 65)),
            "ValidThreadsPerCore": [1, 2],
        },
        "MemoryInfo": {"SizeInMiB": 524288},
        "NetworkInfo": _network("50 Gigabit", 15, 50),
        "InstanceStorageInfo": _ebs_only(),
    },
    {
        "InstanceType": "m6g.xlarge",
        "CurrentGeneration": True,
        "ProcessorInfo": {"SupportedArchitectures": ["arm64"], "SustainedClockSpeedInGhz": 2.5},
        "VCpuInfo": {
            "DefaultVCpus": 4,
            "DefaultCores": 4,
            "DefaultThreadsPerCore": 1,
            "ValidCores": [1, 2, 3, 4],
            "ValidThreadsPerCore": [1],
        },
        "MemoryInfo": {"SizeInMiB": 16384},
        "NetworkInfo": _network("Up to 10 Gigabit", 4, 15),
        "InstanceStorageInfo": _ebs_only(),
    },
    {
        "InstanceType": "c5d.2xlarge",
        "CurrentGeneration": True,
        "ProcessorInfo": {"SupportedArchitectures": ["x86_64"], "SustainedClockSpeedInGhz": 3.4},
        "VCpuInfo": {
            "DefaultVCpus": 8,
            "DefaultCores": 4,
            "DefaultThreadsPerCore": 2,
            "ValidCores": [2, 4],
            "ValidThreadsPerCore": [1, 2],
        },
        "MemoryInfo": {"SizeInMiB": 16384},
        "NetworkInfo": _network("Up to 10 Gigabit", 4, 15),
        "InstanceStorageInfo": {
            "TotalSizeInGB": 200,
            "Disks": [{"SizeInGB": 200, "Count": 1, "Type": "ssd"}],
            "NvmeSupport": "required",
        },
    },
]

# Hourly USD rates per instance type
SAMPLE_PRICING: dict[str, dict[str, float]] = {
    "m5.large": {
        "on_demand": 0.096,
        "reserved_1yr": 0.069,
        "reserved_3yr": 0.045,
        "spot_current": 0.028,
    },
    "c5.xlarge": {
        "on_demand": 0.192,
        "reserved_1yr": 0.138,
        "reserved_3yr": 0.089,
        "spot_current": 0.056,
    },
    "r5.2xlarge": {
        "on_demand": 0.504,
        "reserved_1yr": 0.362,
        "reserved_3yr": 0.234,
        "spot_current": 0.147,
    },
    "p3.2xlarge": {
        "on_demand": 3.06,
        "reserved_1yr": 2.196,
        "reserved_3yr": 1.423,
        "spot_current": 0.918,
    },
    "m6i.32xlarge": {
        "on_demand": 6.144,
        "reserved_1yr": 4.413,
        "reserved_3yr": 2.855,
        "spot_current": 1.843,
    },
    "m6g.xlarge": {
        "on_demand": 0.154,
        "reserved_1yr": 0.097,
        "reserved_3yr": 0.066,
        "spot_current": 0.062,
    },
    "c5d.2xlarge": {
        "on_demand": 0.384,
        "reserved_1yr": 0.242,
        "reserved_3yr": 0.166,
        "spot_current": 0.139,
    },
}
