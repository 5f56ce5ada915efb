"""
Banco de preguntas por defecto del quiz (Aptos Knowledge Challenge)

Se usa cuando la colección `questions` de MongoDB está vacía.
"""

from app.models.question import Question


DEFAULT_QUESTIONS: tuple[Question, ...] = (
    Question(
        prompt="What is the native token of Aptos blockchain?",
        options=["APT", "ETH", "SOL", "BTC"],
        correct_index=0,
    ),
    Question(
        prompt="Which programming language is used for Aptos smart contracts?",
        options=["Solidity", "Rust", "Move", "JavaScript"],
        correct_index=2,
    ),
    Question(
        prompt="What wallet is commonly used with Aptos?",
        options=["MetaMask", "Petra", "Phantom", "Trust Wallet"],
        correct_index=1,
    ),
    Question(
        prompt="Aptos uses which consensus mechanism?",
        options=["Proof of Work", "Proof of Stake", "Byzantine Fault Tolerance", "Delegated Proof of Stake"],
        correct_index=2,
    ),
    Question(
        prompt="What is the maximum TPS (Transactions Per Second) Aptos can theoretically handle?",
        options=["1,000", "10,000", "100,000+", "500"],
        correct_index=2,
    ),
    Question(
        prompt="Who are the co-founders of Aptos Labs?",
        options=["Vitalik Buterin", "Mo Shaikh and Avery Ching", "Charles Hoskinson", "Anatoly Yakovenko"],
        correct_index=1,
    ),
    Question(
        prompt="What was Aptos originally developed from?",
        options=["Ethereum", "Diem (Libra)", "Solana", "Cardano"],
        correct_index=1,
    ),
    Question(
        prompt="What is the Block STM feature in Aptos?",
        options=["Storage mechanism", "Parallel execution engine", "Wallet integration", "Token standard"],
        correct_index=1,
    ),
    Question(
        prompt="What is the Aptos testnet called?",
        options=["Devnet", "Testnet", "Both Devnet and Testnet exist", "Ropsten"],
        correct_index=2,
    ),
    Question(
        prompt="What makes Move language safer than Solidity?",
        options=["Faster execution", "Resource-oriented programming", "Lower gas fees", "Better UI"],
        correct_index=1,
    ),
)

# Un quiz son siempre 10 preguntas (puntuación máxima 100)
QUIZ_LENGTH = len(DEFAULT_QUESTIONS)
