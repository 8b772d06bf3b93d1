"""Container security rules for Kubernetes workloads."""

from __future__ import annotations

from iac_explain.core.manifest import WORKLOAD_KINDS, extract_containers, pod_security_context
from iac_explain.models.findings import Finding, RuleCategory, RuleContext, Severity
from iac_explain.models.manifest import ClusterResource, Container, PodSecurityContext
from iac_explain.rules.base import SecurityRule

POD_SECURITY_STANDARDS = "https://kubernetes.io/docs/concepts/security/pod-security-standards/"


class WorkloadRule(SecurityRule):
    """Base for rules over the containers of Pods and pod-template workloads."""

    provider = "kubernetes"
    resource_types = WORKLOAD_KINDS

    @staticmethod
    def workload(context: RuleContext) -> ClusterResource:
        resource = context.resource
        if isinstance(resource, ClusterResource):
            return resource
        return ClusterResource.model_validate(resource)

    def containers(self, context: RuleContext) -> list[Container]:
        return extract_containers(self.workload(context))


class ContainerLimitsRule(WorkloadRule):
    """Flags containers without resource limits."""

    id = "K8S_NO_LIMITS"
    title = "Missing Resource Limits"
    description = "Containers should have resource limits defined"
    severity = Severity.HIGH
    category = RuleCategory.BEST_PRACTICE
    references = ("https://kubernetes.io/docs/concepts/configuration/manage-resources-containers/",)

    def evaluate(self, context: RuleContext) -> Finding | None:
        offenders = [
            c.name
            for c in self.containers(context)
            if c.resources is None or c.resources.limits is None
        ]
        if not offenders:
            return None

        return self.finding(
            context,
            description="Containers are missing resource limits",
            evidence=f"Containers without limits: {', '.join(offenders)}",
            recommendation="Add resource limits (CPU and memory) to prevent resource exhaustion",
        )


class PrivilegeEscalationRule(WorkloadRule):
    """Flags containers that explicitly allow privilege escalation."""

    id = "K8S_PRIV_ESC"
    title = "Privilege Escalation Allowed"
    description = "Containers should not allow privilege escalation"
    severity = Severity.CRIT
    category = RuleCategory.SECURITY
    references = (POD_SECURITY_STANDARDS,)

    def evaluate(self, context: RuleContext) -> Finding | None:
        offenders = [
            c.name
            for c in self.containers(context)
            if c.security_context is not None
            and c.security_context.allow_privilege_escalation is True
        ]
        if not offenders:
            return None

        return self.finding(
            context,
            description="Containers allow privilege escalation",
            evidence=f"Containers with allowPrivilegeEscalation: {', '.join(offenders)}",
            recommendation="Set allowPrivilegeEscalation to false in securityContext",
        )


def effective_run_as_non_root(
    container: Container, pod_context: PodSecurityContext | None
) -> bool | None:
    """Container-level runAsNonRoot if set, else the pod-level value, else None."""
    if container.security_context is not None and container.security_context.run_as_non_root is not None:
        return container.security_context.run_as_non_root
    if pod_context is not None:
        return pod_context.run_as_non_root
    return None


class RunAsRootRule(WorkloadRule):
    """Flags containers not guaranteed to run as a non-root user."""

    id = "K8S_RUN_AS_ROOT"
    title = "Running as Root"
    description = "Containers should not run as root user"
    severity = Severity.HIGH
    category = RuleCategory.SECURITY
    references = (POD_SECURITY_STANDARDS,)

    def evaluate(self, context: RuleContext) -> Finding | None:
        workload = self.workload(context)
        pod_context = pod_security_context(workload)

        offenders = [
            c.name
            for c in extract_containers(workload)
            if effective_run_as_non_root(c, pod_context) is not True
        ]
        if not offenders:
            return None

        return self.finding(
            context,
            description="Containers may be running as root user",
            evidence=f"Containers without runAsNonRoot=true: {', '.join(offenders)}",
            recommendation="Set runAsNonRoot to true in securityContext or specify a non-root runAsUser",
        )


def is_unpinned_image(image: str | None) -> bool:
    """Whether an image reference uses :latest or carries no tag at all."""
    if not image:
        return True
    return image.endswith(":latest") or ":" not in image


class LatestTagRule(WorkloadRule):
    """Flags containers using :latest or untagged images."""

    id = "K8S_LATEST_TAG"
    title = "Using Latest Image Tag"
    description = "Containers should not use :latest tag"
    severity = Severity.MED
    category = RuleCategory.BEST_PRACTICE
    references = ("https://kubernetes.io/docs/concepts/containers/images/#image-names",)

    def evaluate(self, context: RuleContext) -> Finding | None:
        offenders = [c.name for c in self.containers(context) if is_unpinned_image(c.image)]
        if not offenders:
            return None

        return self.finding(
            context,
            description="Containers are using :latest or untagged images",
            evidence=f"Containers with :latest tag: {', '.join(offenders)}",
            recommendation="Use specific version tags for better reproducibility and security",
        )
