"""Minimal ABIs for the contracts the keeper reads."""

# Loop strategy (ILM) view functions
STRATEGY_ABI = [
    {"name": "rebalanceNeeded", "inputs": [], "outputs": [{"type": "bool", "name": ""}],
     "stateMutability": "view", "type": "function"},
    {"name": "debtUSD", "inputs": [], "outputs": [{"type": "uint256", "name": ""}],
     "stateMutability": "view", "type": "function"},
    {"name": "collateralUSD", "inputs": [], "outputs": [{"type": "uint256", "name": ""}],
     "stateMutability": "view", "type": "function"},
    {"name": "currentCollateralRatio", "inputs": [], "outputs": [{"type": "uint256", "name": ""}],
     "stateMutability": "view", "type": "function"},
    {"name": "getCollateralRatioTargets", "inputs": [], "outputs": [
        {"name": "ratios", "type": "tuple", "components": [
            {"name": "target", "type": "uint256"},
            {"name": "minForRebalance", "type": "uint256"},
            {"name": "maxForRebalance", "type": "uint256"},
            {"name": "minForWithdrawRebalance", "type": "uint256"},
            {"name": "maxForDepositRebalance", "type": "uint256"}]}],
     "stateMutability": "view", "type": "function"},
    {"name": "equity", "inputs": [], "outputs": [{"type": "uint256", "name": ""}],
     "stateMutability": "view", "type": "function"},
    {"name": "totalSupply", "inputs": [], "outputs": [{"type": "uint256", "name": ""}],
     "stateMutability": "view", "type": "function"},
]

# Chainlink AggregatorV3 (price feeds and L2 sequencer uptime feeds)
ORACLE_ABI = [
    {"name": "latestRoundData", "inputs": [], "outputs": [
        {"name": "roundId", "type": "uint80"},
        {"name": "answer", "type": "int256"},
        {"name": "startedAt", "type": "uint256"},
        {"name": "updatedAt", "type": "uint256"},
        {"name": "answeredInRound", "type": "uint80"}],
     "stateMutability": "view", "type": "function"},
    {"name": "latestAnswer", "inputs": [], "outputs": [{"type": "int256", "name": ""}],
     "stateMutability": "view", "type": "function"},
    {"name": "decimals", "inputs": [], "outputs": [{"type": "uint8", "name": ""}],
     "stateMutability": "view", "type": "function"},
]

# Aave v3 IPool.getReserveData
POOL_ABI = [
    {"name": "getReserveData", "inputs": [{"name": "asset", "type": "address"}], "outputs": [
        {"name": "data", "type": "tuple", "components": [
            {"name": "configuration", "type": "uint256"},
            {"name": "liquidityIndex", "type": "uint128"},
            {"name": "currentLiquidityRate", "type": "uint128"},
            {"name": "variableBorrowIndex", "type": "uint128"},
            {"name": "currentVariableBorrowRate", "type": "uint128"},
            {"name": "currentStableBorrowRate", "type": "uint128"},
            {"name": "lastUpdateTimestamp", "type": "uint40"},
            {"name": "id", "type": "uint16"},
            {"name": "aTokenAddress", "type": "address"},
            {"name": "stableDebtTokenAddress", "type": "address"},
            {"name": "variableDebtTokenAddress", "type": "address"},
            {"name": "interestRateStrategyAddress", "type": "address"},
            {"name": "accruedToTreasury", "type": "uint128"},
            {"name": "unbacked", "type": "uint128"},
            {"name": "isolationModeTotalDebt", "type": "uint128"}]}],
     "stateMutability": "view", "type": "function"},
]
