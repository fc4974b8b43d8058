"""Preset research workloads.

Each preset embeds the compute requirements a typical job of that kind
needs; matcher.match_for_workload scores the catalog against them.
"""

from .schema import (
    Architecture,
    ComputeRequirements,
    ResearchWorkload,
    RuntimeEstimate,
    RuntimeUnit,
    StorageType,
    WorkloadCategory,
)

RESEARCH_WORKLOADS: list[ResearchWorkload] = [
    ResearchWorkload(
        id="genomics-alignment",
        name="Genomic Sequence Alignment",
        description="Short-read alignment and variant calling (BWA, GATK) over whole genomes",
        category=WorkloadCategory.GENOMICS,
        requirements=ComputeRequirements(
            min_vcpus=16,
            min_memory_gib=64,
            architecture=Architecture.X86_64,
        ),
        estimated_runtime=RuntimeEstimate(min=4, max=24, unit=RuntimeUnit.HOURS),
    ),
    ResearchWorkload(
        id="climate-modeling",
        name="Climate Simulation",
        description="Long-running coupled climate and regional weather models",
        category=WorkloadCategory.CLIMATE,
        requirements=ComputeRequirements(
            min_vcpus=32,
            min_memory_gib=128,
            network_performance=["25 Gigabit", "50 Gigabit", "100 Gigabit"],
        ),
        estimated_runtime=RuntimeEstimate(min=1, max=14, unit=RuntimeUnit.DAYS),
    ),
    ResearchWorkload(
        id="llm-training",
        name="Large Language Model Training",
        description="Fine-tuning and training transformer models on GPU",
        category=WorkloadCategory.ML,
        requirements=ComputeRequirements(
            min_vcpus=8,
            min_memory_gib=32,
            require_gpu=True,
            min_gpu_memory_gib=16,
        ),
        estimated_runtime=RuntimeEstimate(min=1, max=4, unit=RuntimeUnit.WEEKS),
    ),
    ResearchWorkload(
        id="ml-inference",
        name="Model Inference Service",
        description="Batch or online inference for trained models",
        category=WorkloadCategory.ML,
        requirements=ComputeRequirements(
            min_vcpus=4,
            max_vcpus=16,
            min_memory_gib=16,
            max_memory_gib=64,
        ),
    ),
    ResearchWorkload(
        id="molecular-dynamics",
        name="Molecular Dynamics",
        description="GROMACS / NAMD protein and materials simulations",
        category=WorkloadCategory.CHEMISTRY,
        requirements=ComputeRequirements(
            min_vcpus=8,
            min_memory_gib=16,
            storage_type=StorageType.INSTANCE,
        ),
        estimated_runtime=RuntimeEstimate(min=12, max=72, unit=RuntimeUnit.HOURS),
    ),
    ResearchWorkload(
        id="cfd-simulation",
        name="Computational Fluid Dynamics",
        description="OpenFOAM meshing and solver runs for engineering design",
        category=WorkloadCategory.ENGINEERING,
        requirements=ComputeRequirements(
            min_vcpus=4,
            min_memory_gib=8,
            max_memory_gib=128,
        ),
        estimated_runtime=RuntimeEstimate(min=2, max=48, unit=RuntimeUnit.HOURS),
    ),
    ResearchWorkload(
        id="particle-physics",
        name="Particle Physics Event Processing",
        description="Embarrassingly parallel event reconstruction and Monte Carlo",
        category=WorkloadCategory.PHYSICS,
        requirements=ComputeRequirements(
            min_vcpus=2,
            min_memory_gib=4,
            storage_type=StorageType.ANY,
        ),
        estimated_runtime=RuntimeEstimate(min=1, max=8, unit=RuntimeUnit.HOURS),
    ),
]

_WORKLOADS_BY_ID = {w.id: w for w in RESEARCH_WORKLOADS}


def get_workload(workload_id: str) -> ResearchWorkload:
    """Look up a preset by id.

    Raises:
        KeyError: if no preset has that id
    """
    try:
        return _WORKLOADS_BY_ID[workload_id]
    except KeyError:
        raise KeyError(f"Unknown workload preset: {workload_id}") from None
