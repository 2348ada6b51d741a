"""
Node.js Lambda function construct.

Resolves the handler entry file, validates the dependency lock file, hands
both to a bundler and adds the resulting function to a CloudFormation template.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

from troposphere import GetAtt, Sub, Tags, Template
from troposphere import awslambda, ec2, iam

from ..config import FunctionConfig
from ..lambda_utils.bundling import Bundler, BundlingOptions, CodeLocation
from ..lambda_utils.entry import ResolutionRequest, find_defining_file, resolve_entry
from ..lambda_utils.lock_file import find_lock_file, resolve_deps_lock_file
from ..lambda_utils.runtime import validate_nodejs_runtime

logger = logging.getLogger(__name__)

CONNECTION_REUSE_VARIABLE = "AWS_NODEJS_CONNECTION_REUSE_ENABLED"

BASIC_EXECUTION_POLICY = "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"
VPC_ACCESS_POLICY = "arn:aws:iam::aws:policy/service-role/AWSLambdaVPCAccessExecutionRole"


def handler_name(handler: str) -> str:
    """Prefix handlers without a dot with ``index.``, the bundled file name."""
    if "." in handler:
        return handler
    return f"index.{handler}"


def logical_id(construct_id: str) -> str:
    """CloudFormation logical ids must be alphanumeric."""
    cleaned = re.sub(r"[^A-Za-z0-9]", "", construct_id)
    if not cleaned:
        raise ValueError(f"Cannot derive a logical id from construct id '{construct_id}'")
    return cleaned


class NodejsFunctionConstruct:
    """
    Construct for a Node.js Lambda function.
    Creates the execution role, an optional security group and the function.
    """

    def __init__(
        self,
        template: Template,
        construct_id: str,
        config: FunctionConfig,
        bundler: Bundler,
        environment: str = "dev",
        vpc_config: Optional[Dict[str, Any]] = None,
        defining_file: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize Node.js function construct.

        Args:
            template: CloudFormation template to add resources to
            construct_id: Identifier of the function, also used to discover its handler file
            config: Function configuration
            bundler: Bundler producing the function code location
            environment: Deployment environment (dev/staging/prod)
            vpc_config: Optional VPC configuration with vpc_id, subnet_ids
                and security_group_ids
            defining_file: File the function is defined in (defaults to the caller)
        """
        self.template = template
        self.construct_id = construct_id
        self.logical_id = logical_id(construct_id)
        self.config = config
        self.bundler = bundler
        self.environment = environment
        self.vpc_config = vpc_config
        self.defining_file = Path(defining_file) if defining_file else find_defining_file()
        self.resources = {}

        self.runtime = validate_nodejs_runtime(config.runtime)
        self._validate_vpc_config()
        self.entry = resolve_entry(
            ResolutionRequest(
                construct_id=construct_id,
                defining_file=self.defining_file,
                entry=config.entry,
            )
        ).path
        self.deps_lock_file_path = self._resolve_lock_file()
        self.code_location = self._bundle()

        self._create_lambda_role()
        self._create_security_group()
        self._create_lambda_function()

    def _validate_vpc_config(self):
        """Check VPC settings before anything is bundled or added to the template."""
        if not self.vpc_config:
            return

        missing = []
        if not self.vpc_config.get("security_group_ids") and not self.vpc_config.get("vpc_id"):
            missing.append("vpc_id")
        if not self.vpc_config.get("subnet_ids"):
            missing.append("subnet_ids")
        if missing:
            raise ValueError(
                f"Invalid vpc_config for {self.construct_id}: missing {', '.join(missing)}"
            )

    def _resolve_lock_file(self) -> Path:
        if self.config.deps_lock_file_path:
            return resolve_deps_lock_file(self.config.deps_lock_file_path)
        return find_lock_file(self.entry.parent)

    def _bundle(self) -> CodeLocation:
        bundling = self.config.bundling
        options = BundlingOptions(
            entry=self.entry,
            deps_lock_file_path=self.deps_lock_file_path,
            runtime=self.runtime,
            architecture=self.config.architecture,
            environment=dict(bundling.get("environment", {})),
            minify=bundling.get("minify", False),
            source_map=bundling.get("source_map", False),
            external_modules=list(bundling.get("external_modules", [])),
        )

        logger.info(f"Bundling {self.construct_id} from {self.entry}")
        return self.bundler.bundle(options)

    def _create_lambda_role(self):
        """Create IAM execution role for the function."""
        managed_policies = [BASIC_EXECUTION_POLICY]
        if self.vpc_config:
            managed_policies.append(VPC_ACCESS_POLICY)

        self.lambda_role = self.template.add_resource(
            iam.Role(
                f"{self.logical_id}ServiceRole",
                AssumeRolePolicyDocument={
                    "Version": "2012-10-17",
                    "Statement": [{
                        "Effect": "Allow",
                        "Principal": {"Service": ["lambda.amazonaws.com"]},
                        "Action": ["sts:AssumeRole"]
                    }]
                },
                ManagedPolicyArns=managed_policies,
                Tags=Tags(
                    Name=Sub(f"${{AWS::StackName}}-{self.construct_id}-role"),
                    Environment=self.environment
                )
            )
        )

        self.resources["lambda_role"] = self.lambda_role

    def _create_security_group(self):
        """Create a security group when the function joins a VPC without one."""
        self.security_group = None
        if not self.vpc_config or self.vpc_config.get("security_group_ids"):
            return

        self.security_group = self.template.add_resource(
            ec2.SecurityGroup(
                f"{self.logical_id}SecurityGroup",
                GroupDescription=f"Automatic security group for Lambda Function {self.construct_id}",
                VpcId=self.vpc_config["vpc_id"],
                SecurityGroupEgress=[
                    ec2.SecurityGroupRule(
                        IpProtocol="-1",
                        CidrIp="0.0.0.0/0",
                        Description="Allow all outbound traffic",
                    )
                ],
                Tags=Tags(
                    Name=Sub(f"${{AWS::StackName}}-{self.construct_id}-sg"),
                    Environment=self.environment,
                ),
            )
        )

        self.resources["security_group"] = self.security_group

    def _environment_variables(self) -> Dict[str, str]:
        env_vars = dict(self.config.environment_variables)
        if self.config.aws_sdk_connection_reuse:
            env_vars[CONNECTION_REUSE_VARIABLE] = "1"
        return env_vars

    def _create_lambda_function(self):
        """Create Lambda function."""
        function_props = {
            "Code": awslambda.Code(
                S3Bucket=self.code_location.s3_bucket,
                S3Key=self.code_location.s3_key,
            ),
            "Handler": handler_name(self.config.handler),
            "Runtime": self.runtime,
            "Role": GetAtt(self.lambda_role, "Arn"),
            "MemorySize": self.config.memory_size,
            "Timeout": self.config.timeout,
            "Architectures": [self.config.architecture],
            "Tags": Tags(
                Name=Sub(f"${{AWS::StackName}}-{self.construct_id}"),
                Environment=self.environment
            )
        }

        env_vars = self._environment_variables()
        if env_vars:
            function_props["Environment"] = awslambda.Environment(Variables=env_vars)

        if self.vpc_config:
            if self.security_group is not None:
                security_group_ids = [GetAtt(self.security_group, "GroupId")]
            else:
                security_group_ids = list(self.vpc_config["security_group_ids"])
            function_props["VpcConfig"] = awslambda.VPCConfig(
                SubnetIds=list(self.vpc_config["subnet_ids"]),
                SecurityGroupIds=security_group_ids,
            )

        self.lambda_function = self.template.add_resource(
            awslambda.Function(self.logical_id, **function_props)
        )

        self.resources["lambda_function"] = self.lambda_function

    def get_lambda_function_arn(self):
        """Get Lambda function ARN."""
        return GetAtt(self.lambda_function, "Arn")
