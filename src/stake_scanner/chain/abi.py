"""Minimal ABIs for the read calls the scanner makes."""

STAKING_ABI = [
    {
        "inputs": [{"internalType": "address", "name": "user", "type": "address"}],
        "name": "stakeCount",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "address", "name": "user", "type": "address"},
            {"internalType": "uint256", "name": "index", "type": "uint256"},
        ],
        "name": "userStakeRecord",
        "outputs": [
            {"internalType": "uint40", "name": "stakeTime", "type": "uint40"},
            {"internalType": "uint160", "name": "amount", "type": "uint160"},
            {"internalType": "bool", "name": "status", "type": "bool"},
            {"internalType": "uint8", "name": "stakeIndex", "type": "uint8"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]

ERC20_ABI = [
    {
        "inputs": [{"internalType": "address", "name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]
