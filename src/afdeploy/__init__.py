"""afdeploy - multi-region Azure Front Door provisioning CLI

Philosophy:
- Ruthless simplicity
- Everything created lives in one resource group
- Teardown always runs, success or failure
- Fail fast with helpful guidance

afdeploy creates a set of regional web apps, fronts them with an Azure Front
Door profile (endpoint, origin group, origins and route) and then deletes the
resource group it created. It also ships a retrying SSH executor used to
deprovision the Azure Linux agent on a VM.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
