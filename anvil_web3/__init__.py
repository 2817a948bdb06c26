import logging

api_logger = logging.getLogger("anvil_web3.api")
instance_logger = logging.getLogger("anvil_web3.instance")
